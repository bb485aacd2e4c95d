"""
eAccess 协议基类 (Base Protocol)

定义握手协议策略必须实现的抽象接口。
"""

import abc
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import EAccessConfig
    from ..network import LineClient
    from ..state import SessionState
    from .sge.packets import CharacterList, InstanceList, LaunchInfo


class BaseProtocol(abc.ABC):
    """协议策略抽象基类。

    具体的协议实现必须继承此类，并实现认证、实例查询、
    角色查询与启动信息获取的异步逻辑。
    """

    def __init__(
        self,
        config: "EAccessConfig",
        state: "SessionState",
        net_client: "LineClient",
    ) -> None:
        """初始化协议基类。

        Args:
            config: 全局配置对象。
            state: 共享状态对象。
            net_client: 异步按行收发客户端实例。
        """
        self.config = config
        self.state = state
        self.net_client = net_client
        self.logger = logging.getLogger(self.__class__.__name__)

    @abc.abstractmethod
    async def login(self) -> bool:
        """[Abstract] 执行认证流程。

        Returns:
            bool: 认证成功返回 True。

        Raises:
            AuthError: 认证被拒绝（账号不存在、密码错误等）。
            NetworkError: 网络通信异常。
            ParseError: 服务器答复无法解析。
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def list_instances(self) -> "InstanceList":
        """[Abstract] 查询账号可访问的实例列表。"""
        raise NotImplementedError

    @abc.abstractmethod
    async def list_characters(self, node: str) -> "CharacterList":
        """[Abstract] 选定实例并查询其角色列表。"""
        raise NotImplementedError

    @abc.abstractmethod
    async def launch(self, character_id: str) -> "LaunchInfo":
        """[Abstract] 为指定角色获取启动信息。"""
        raise NotImplementedError
