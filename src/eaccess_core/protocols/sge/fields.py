# src/eaccess_core/protocols/sge/fields.py
"""
SGE 协议 - 开放枚举字段 (Open Enumerations)

服务器可能随时下发新的取值，因此每个枚举都是"开放"的：
已知取值映射到具名成员，未知取值保留为携带原文的 `Other`，
解析永远不会因为枚举值无法识别而失败。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


@dataclass(frozen=True)
class Other:
    """无法识别的枚举取值，原样保留服务器文本。"""

    raw: str

    @property
    def value(self) -> str:
        return self.raw

    @property
    def name(self) -> str:
        return "OTHER"


class OpenEnum(Enum):
    """带兜底分支的枚举基类。"""

    @classmethod
    def from_text(cls, raw):
        """将原始文本映射为具名成员，映射表之外的文本变为 `Other(raw)`。"""
        try:
            return cls(raw)
        except ValueError:
            return Other(raw)


class Environment(OpenEnum):
    """N 报文: 实例运行环境"""

    PRODUCTION = "PRODUCTION"
    DEVELOPMENT = "DEVELOPMENT"


class Protocol(OpenEnum):
    """N 报文: 游戏会话协议，亦用于 L 请求"""

    STORM = "STORM"


class AccessTier(OpenEnum):
    """N 报文: 账号访问级别。字段缺失时为 NONE。"""

    NONE = None
    TRIAL = "TRIAL"


class PaymentStatus(OpenEnum):
    """F 报文与 G 报文中的付费状态"""

    NEED_BILL = "NEED_BILL"
    FREE = "FREE"
    FREE_TO_PLAY = "FREE_TO_PLAY"
    # 以下两种取值见于社区文档，尚未在实际流量中观察到
    EXPIRED = "EXPIRED"
    NEW_TO_GAME = "NEW_TO_GAME"


EnvironmentField = Union[Environment, Other]
ProtocolField = Union[Protocol, Other]
AccessTierField = Union[AccessTier, Other]
PaymentStatusField = Union[PaymentStatus, Other]


def to_text(field: OpenEnum | Other) -> str | None:
    """返回枚举取值在线路上的原始文本 (AccessTier.NONE 返回 None)。"""
    return field.value
