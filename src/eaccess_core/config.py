"""
eAccess 核心库 - 配置模块

负责配置的加载、解析与强类型转换。
支持从 TOML 文件、环境变量或字典中加载配置。
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .exceptions import ConfigError
from .protocols.sge import constants

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EAccessConfig:
    """EAccessCore 的强类型配置对象。

    所有字段均为只读 (frozen=True)，确保配置在运行时不可变。

    Attributes:
        account: 账号名。
        password: 账号密码 (明文，仅在 A 请求前被混淆)。
        host: eAccess 服务器主机名。
        port: eAccess 服务器端口 (通常为 7900)。
        game: 目标实例，节点代码 (如 'GS3') 或显示名 (如 'GemStone IV')。
        character: 目标角色，角色 ID 或角色名。为空时选择第一个角色。
        client_protocol: L 请求中声明的会话协议 (通常为 'STORM')。
        timeout: 单次读取一行答复的超时时间 (秒)。
    """

    account: str
    password: str
    host: str = constants.DEFAULT_HOST
    port: int = constants.DEFAULT_PORT
    game: str = "GemStone IV"
    character: str = ""
    client_protocol: str = "STORM"
    timeout: float = 10.0

    def __repr__(self) -> str:
        """
        覆盖默认的 repr，隐藏密码字段，防止日志泄露敏感信息。
        """
        return (
            f"<{self.__class__.__name__} "
            f"server={self.host}:{self.port}, "
            f"account='{self.account}', "
            f"password='******', "
            f"game='{self.game}', "
            f"character='{self.character}'>"
        )


def create_config_from_dict(raw_data: dict[str, Any]) -> EAccessConfig:
    """通用工厂：将字典转换为强类型配置对象。

    负责字段的清洗、默认值注入和类型转换。

    Args:
        raw_data: 原始配置字典 (来自 TOML、Env 或命令行)。

    Returns:
        EAccessConfig: 验证并转换后的配置对象。

    Raises:
        ConfigError: 当必要字段缺失或格式错误时抛出。
    """

    # --- 内部辅助函数 ---
    def _req(key: str) -> str:
        """获取必要字段，缺失或为空则报错"""
        val = raw_data.get(key)
        if val is None or str(val) == "":
            raise ConfigError(f"配置缺失: 缺少必要字段 '{key}'")
        return str(val)

    def _get(key: str, default: Any) -> Any:
        """获取可选字段，缺失则使用默认值"""
        val = raw_data.get(key)
        return default if val is None else val

    def _to_int(key: str, default: int) -> int:
        val = _get(key, default)
        try:
            return int(val)
        except (TypeError, ValueError):
            raise ConfigError(f"整数格式无效 '{key}': {val}")

    def _to_float(key: str, default: float) -> float:
        val = _get(key, default)
        try:
            result = float(val)
        except (TypeError, ValueError):
            raise ConfigError(f"数值格式无效 '{key}': {val}")
        if result <= 0:
            raise ConfigError(f"'{key}' 必须为正数: {val}")
        return result

    port = _to_int("port", constants.DEFAULT_PORT)
    if not 0 < port < 65536:
        raise ConfigError(f"端口超出范围: {port}")

    # --- 构建对象 ---
    return EAccessConfig(
        account=_req("account"),
        password=_req("password"),
        host=str(_get("host", constants.DEFAULT_HOST)),
        port=port,
        game=str(_get("game", "GemStone IV")),
        character=str(_get("character", "")),
        client_protocol=str(_get("client_protocol", "STORM")).upper(),
        timeout=_to_float("timeout", 10.0),
    )


# 字段映射表 (Config Field -> Env Suffix)
ENV_MAP = {
    "account": "ACCOUNT",
    "password": "PASSWORD",
    "host": "HOST",
    "port": "PORT",
    "game": "GAME",
    "character": "CHARACTER",
    "client_protocol": "CLIENT_PROTOCOL",
    "timeout": "TIMEOUT",
}


def read_toml_values(file_path: Path, profile: str = "default") -> dict[str, Any]:
    """读取 TOML 文件中的原始配置字典 (不做校验)。

    支持多层级查找策略:
    1. [profile.xxx]: 优先查找指定的 profile 块。
    2. [eaccess]: 单账号配置块。
    3. Root: 兼容根目录直接配置。

    Raises:
        ConfigError: 文件读取失败或 Profile 不存在。
    """
    if not file_path.exists():
        raise ConfigError(f"配置文件未找到: {file_path}")

    try:
        with open(file_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"读取 TOML 失败: {e}") from e

    # 优先查找 profile
    if "profile" in data:
        if profile not in data["profile"]:
            raise ConfigError(f"未找到预设: [profile.{profile}]")
        return dict(data["profile"][profile])

    if "eaccess" in data:
        if profile != "default":
            logger.warning(f"配置仅包含 [eaccess] 节，忽略 profile='{profile}'。")
        return dict(data["eaccess"])

    return dict(data)


def read_env_values() -> dict[str, str]:
    """收集所有以 `EACCESS_` 开头的环境变量 (不做校验)。

    例如: `EACCESS_ACCOUNT` -> `account`。
    """
    raw_data = {}
    for cfg_key, env_suffix in ENV_MAP.items():
        val = os.environ.get(f"EACCESS_{env_suffix}")
        if val is not None:
            raw_data[cfg_key] = val
    return raw_data


def load_config_from_toml(file_path: Path, profile: str = "default") -> EAccessConfig:
    """从 TOML 文件加载配置。

    Args:
        file_path: TOML 文件路径。
        profile: 配置预设名。默认为 "default"。

    Returns:
        EAccessConfig: 配置对象。

    Raises:
        ConfigError: 文件读取失败、Profile 不存在或字段无效。
    """
    return create_config_from_dict(read_toml_values(file_path, profile))


def load_config_from_env() -> EAccessConfig:
    """从环境变量加载配置。

    Returns:
        EAccessConfig: 配置对象。

    Raises:
        ConfigError: 未检测到任何相关环境变量，或字段无效。
    """
    raw_data = read_env_values()
    if not raw_data:
        raise ConfigError("未检测到 EACCESS_ 前缀的环境变量")

    return create_config_from_dict(raw_data)
