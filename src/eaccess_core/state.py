# File: src/eaccess_core/state.py
"""
eAccess 核心库 - 状态模块

负责定义和存储所有易变的会话状态。
本模块不包含业务逻辑，仅作为数据容器供 Core 和 Strategy 共享读写。
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .protocols.sge.packets import LaunchInfo


class SessionStatus(Enum):
    """握手会话的生命周期状态枚举。

    状态流转示意:
    IDLE -> CONNECTING -> AUTHENTICATED -> INSTANCE_SELECTED -> LAUNCH_READY -> CLOSED
               |              |                  |
               v              v                  v
             ERROR          ERROR              ERROR
    """

    IDLE = auto()
    """初始状态，引擎已实例化但未执行任何操作。"""

    CONNECTING = auto()
    """正在连接并认证 (K/A 交互)。"""

    AUTHENTICATED = auto()
    """认证成功，可以查询实例列表。"""

    INSTANCE_SELECTED = auto()
    """已发送 G 请求，服务器已确定当前实例，可以查询角色列表。"""

    LAUNCH_READY = auto()
    """已获取启动信息 (L 报文)，握手完成。"""

    CLOSED = auto()
    """连接已关闭。"""

    ERROR = auto()
    """错误状态。认证被拒绝、网络中断或收到无法解析的答复。"""


@dataclass
class SessionState:
    """存储 eAccess 握手会话的易变状态数据。

    该对象是非持久化的。每次重新握手时建议重新实例化此对象。

    Attributes:
        hash_key: K 阶段从服务器获取的 Hash Key。
        account: 服务器在 A 答复中确认的账号名。
        instances: M 阶段获取的实例列表 (节点代码, 显示名)。
        node: 当前选定的实例节点代码。
        characters: C 阶段获取的角色列表 (角色 ID, 角色名)。
        launch: L 阶段获取的启动信息。
        status: 当前会话状态。
        last_error: 最近一次发生的错误信息描述，用于 UI 显示。
    """

    hash_key: str = ""
    account: str = ""
    instances: tuple[tuple[str, str], ...] = ()
    node: str = ""
    characters: tuple[tuple[str, str], ...] = ()
    launch: "LaunchInfo | None" = None

    status: SessionStatus = SessionStatus.IDLE
    last_error: str = ""

    @property
    def is_authenticated(self) -> bool:
        """判断当前是否已通过认证 (含后续阶段)。"""
        return self.status in (
            SessionStatus.AUTHENTICATED,
            SessionStatus.INSTANCE_SELECTED,
            SessionStatus.LAUNCH_READY,
        )

    def __repr__(self) -> str:
        """隐藏 Hash Key 的安全字符串表示。"""
        return (
            f"<{self.__class__.__name__} "
            f"status={self.status.name}, "
            f"account='{self.account}', "
            f"node='{self.node}', "
            f"instances={len(self.instances)}, "
            f"characters={len(self.characters)}>"
        )
