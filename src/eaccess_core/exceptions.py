# File: src/eaccess_core/exceptions.py
"""
eAccess 核心库 - 异常体系 (Exceptions)

定义库内统一使用的异常类，以便上层应用（如 CLI）能进行精细的错误处理。
"""

from collections.abc import Iterable


class EAccessError(Exception):
    """eAccess 核心库的所有内部异常的基类。

    上层应用可以通过捕获此异常来处理所有由 eaccess-core 抛出的已知错误。
    """

    pass


class ConfigError(EAccessError):
    """配置加载或校验失败。

    触发场景:
    1. 缺少必要字段 (如 account/password)。
    2. 字段格式错误 (如端口不是整数)。
    3. 找不到配置文件或环境变量。
    """

    pass


class NetworkError(EAccessError):
    """网络层面的错误 (I/O 级别)。

    触发场景:
    1. TCP 连接失败或 DNS 解析失败。
    2. 发送或接收超时。
    3. 服务器在一行结束 (换行符) 之前关闭了连接。
    """

    pass


class ProtocolError(EAccessError):
    """协议交互错误 (逻辑级别)。

    触发场景:
    1. 服务器响应的行无法按预期报文解析。
    2. 服务器返回的实例或角色中找不到配置指定的目标。
    """

    pass


class ParseError(ProtocolError):
    """报文解析失败 (编解码层唯一的错误类型)。

    由 `protocols.sge` 中的语法原语抛出。携带一条或多条失败原因，
    每条原因说明期望的内容以及出错的偏移量。存在多个候选解析分支时，
    所有分支的失败原因会被合并。
    """

    def __init__(self, reasons: str | Iterable[str]) -> None:
        """初始化解析错误。

        Args:
            reasons: 单条失败原因，或多条候选分支的失败原因。
        """
        if isinstance(reasons, str):
            reasons = [reasons]
        self.reasons: tuple[str, ...] = tuple(reasons)
        super().__init__("\n".join(self.reasons))


class AuthError(EAccessError):
    """认证被拒绝 (业务层面的失败)。

    当服务器对 A 请求的答复不符合成功报文格式时抛出
    (例如账号不存在或密码错误)。需要用户干预，不应自动重试。
    """

    def __init__(self, message: str, reply: str | None = None) -> None:
        """初始化认证错误。

        Args:
            message: 错误描述信息。
            reply: 服务器原始答复行 (去除换行符)，用于诊断。
        """
        super().__init__(message)
        self.reply = reply


class StateError(EAccessError):
    """状态机错误 (FSM Violation)。

    触发场景:
    1. 在未认证状态下请求实例列表或角色列表。
    2. 在未选择实例的情况下请求启动信息。
    """

    pass
