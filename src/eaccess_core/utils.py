# File: src/eaccess_core/utils.py
"""
eAccess 核心库 - 通用算法工具箱

本模块汇集了 eAccess 登录流程使用的字节级算法。
"""


def _as_bytes(data: bytes | str) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def hash_password(password: bytes | str, hash_key: bytes | str) -> bytes:
    """使用服务器下发的 Hash Key 对密码做逐字节混淆。

    这是遗留协议规定的固定混淆方案，不是密码学意义上的加密，
    不提供任何机密性保证。

    算法逻辑:
    out[i] = ((password[i] - 0x20) XOR key[i]) + 0x20，按 8 位取模。

    注意: 密码与 Key 按位置配对，长度取两者较短者。密码比 Key 长时，
    多出的密码字节会被直接丢弃 (保持与服务器的线上兼容)。

    Args:
        password: 明文密码 (str 按 UTF-8 编码)。
        hash_key: K 请求返回的 Hash Key。

    Returns:
        bytes: 混淆后的密码，长度为 min(len(password), len(hash_key))。
    """
    pwd_bytes = _as_bytes(password)
    key_bytes = _as_bytes(hash_key)

    ret = bytearray()
    for p, k in zip(pwd_bytes, key_bytes):
        # 保留 8 位无符号整数范围
        ret.append(((((p - 0x20) & 0xFF) ^ k) + 0x20) & 0xFF)

    return bytes(ret)
