# src/eaccess_core/__init__.py
"""
eAccess-Core v1.0.0
SGE (eAccess) 游戏登录协议的编解码与握手核心库。
"""

# 暴露核心配置
from .config import (
    EAccessConfig,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
)

# 暴露引擎与状态
from .core import EAccessCore

# 暴露异常体系 (方便上层 try-except)
from .exceptions import (
    AuthError,
    ConfigError,
    EAccessError,
    NetworkError,
    ParseError,
    ProtocolError,
    StateError,
)
from .state import SessionState, SessionStatus
from .utils import hash_password

__version__ = "1.0.0"

__all__ = [
    "EAccessCore",
    "EAccessConfig",
    "SessionState",
    "SessionStatus",
    "create_config_from_dict",
    "load_config_from_env",
    "load_config_from_toml",
    "hash_password",
    "EAccessError",
    "ConfigError",
    "NetworkError",
    "AuthError",
    "ParseError",
    "ProtocolError",
    "StateError",
]
