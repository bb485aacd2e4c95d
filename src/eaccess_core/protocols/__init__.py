# src/eaccess_core/protocols/__init__.py
"""
eAccess 协议层 (Protocol Layer)

本包负责协议报文的纯粹构建 (Encode) 与解析 (Parse)，以及握手策略。

- 编解码部分不包含任何 socket 操作或网络 I/O。
- 编解码部分不包含任何状态管理 (State)。
- 编解码部分不依赖于 core 或 network 层。
"""

from ..utils import hash_password
from .sge.fields import (
    AccessTier,
    Environment,
    Other,
    PaymentStatus,
    Protocol,
    to_text,
)
from .sge.packets import (
    Auth,
    CharacterList,
    GeneralInfo,
    HashKey,
    InstanceList,
    LaunchInfo,
    Message,
    NodeInfo,
    PaymentStatusMessage,
    UnknownFields,
)

# 公共 API
__all__ = [
    "hash_password",
    "Message",
    "HashKey",
    "Auth",
    "InstanceList",
    "NodeInfo",
    "PaymentStatusMessage",
    "GeneralInfo",
    "UnknownFields",
    "CharacterList",
    "LaunchInfo",
    "Environment",
    "Protocol",
    "AccessTier",
    "PaymentStatus",
    "Other",
    "to_text",
]
