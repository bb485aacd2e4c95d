"""
SGE (eAccess) 握手策略 (Strategy) - [Asyncio Edition]

职责：
1. 流程编排：K -> A -> M -> (N/F/P) -> G -> C -> L。
2. 状态维护：将每一步的结果写入共享的 SessionState。
3. 异常处理：将不符合成功语法的 A 答复转化为 AuthError。

协议是严格的一问一答，任何时刻只有一个请求在途。
"""

from typing import TYPE_CHECKING, TypeVar

from ...exceptions import AuthError, ParseError, StateError
from ...state import SessionStatus
from ...utils import hash_password
from ..base import BaseProtocol
from . import packets

if TYPE_CHECKING:
    from ...config import EAccessConfig
    from ...network import LineClient
    from ...state import SessionState

M = TypeVar("M", bound=packets.Message)


class ProtocolSGE(BaseProtocol):
    """SGE (eAccess) 握手策略实现 (Async)。"""

    def __init__(
        self,
        config: "EAccessConfig",
        state: "SessionState",
        net_client: "LineClient",
    ):
        """初始化协议策略。

        Args:
            config: 全局配置对象。
            state: 共享状态对象。
            net_client: 异步按行收发客户端。
        """
        super().__init__(config, state, net_client)
        self.logger.info(f"SGE 握手策略已加载 (Account: {config.account})")

    async def login(self) -> bool:
        """执行认证流程 (K -> A)。

        Returns:
            bool: 认证成功返回 True。

        Raises:
            AuthError: 服务器拒绝认证。
            NetworkError: 网络超时或连接中断。
            ParseError: K 答复无法解析。
        """
        self.logger.info("开始 SGE 认证流程...")
        self.state.status = SessionStatus.CONNECTING

        # 1. 获取 Hash Key
        hash_key = await self._exchange(packets.HashKey.encode(), packets.HashKey)
        self.state.hash_key = hash_key.key

        # 2. 混淆密码并认证
        if len(self.config.password.encode("utf-8")) > len(hash_key.key.encode("utf-8")):
            self.logger.warning("密码长度超过 Hash Key，超出部分将被截断")

        hashed = hash_password(self.config.password, hash_key.key)
        await self.net_client.send(packets.Auth.encode(self.config.account, hashed))
        reply = await self.net_client.read_line()

        try:
            auth = packets.Auth.parse(reply)
        except ParseError as e:
            raise AuthError(
                f"认证被拒绝: {reply.rstrip()}", reply=reply.rstrip("\n")
            ) from e

        self.state.account = auth.account
        self.state.status = SessionStatus.AUTHENTICATED
        self.logger.info(f"认证成功 (Account: {auth.account}, Name: {auth.name})")
        return True

    async def list_instances(self) -> packets.InstanceList:
        """查询账号可访问的实例列表 (M)。"""
        self._require_authenticated()
        instances = await self._exchange(
            packets.InstanceList.encode(), packets.InstanceList
        )
        self.state.instances = instances.instances
        return instances

    async def node_info(self, node: str) -> packets.NodeInfo:
        """查询实例环境信息 (N)。"""
        self._require_authenticated()
        return await self._exchange(packets.NodeInfo.encode(node), packets.NodeInfo)

    async def payment_status(self, node: str) -> packets.PaymentStatusMessage:
        """查询账号在实例上的付费状态 (F)。"""
        self._require_authenticated()
        return await self._exchange(
            packets.PaymentStatusMessage.encode(node), packets.PaymentStatusMessage
        )

    async def general_info(self, node: str) -> packets.GeneralInfo:
        """查询实例综合信息 (G)，同时将该实例设为当前实例。"""
        self._require_authenticated()
        info = await self._exchange(
            packets.GeneralInfo.encode(node), packets.GeneralInfo
        )
        self.state.node = node
        self.state.characters = ()
        self.state.status = SessionStatus.INSTANCE_SELECTED
        return info

    async def unknown_fields(self, node: str) -> packets.UnknownFields:
        """发送 P 请求，答复字段含义未知，原样返回。"""
        self._require_authenticated()
        return await self._exchange(
            packets.UnknownFields.encode(node), packets.UnknownFields
        )

    async def list_characters(self, node: str) -> packets.CharacterList:
        """选定实例 (G) 并查询其角色列表 (C)。"""
        await self.general_info(node)
        characters = await self._exchange(
            packets.CharacterList.encode(), packets.CharacterList
        )
        self.state.characters = characters.characters
        if characters.num_characters != len(characters.characters):
            self.logger.debug(
                f"角色数量字段 ({characters.num_characters}) "
                f"与列表长度 ({len(characters.characters)}) 不一致"
            )
        return characters

    async def launch(self, character_id: str) -> packets.LaunchInfo:
        """为指定角色获取启动信息 (L)。

        Raises:
            StateError: 尚未通过 G 请求选定实例。
        """
        if self.state.status not in (
            SessionStatus.INSTANCE_SELECTED,
            SessionStatus.LAUNCH_READY,
        ):
            raise StateError("请求启动信息前必须先选定实例")

        info = await self._exchange(
            packets.LaunchInfo.encode(character_id, self.config.client_protocol),
            packets.LaunchInfo,
        )
        self.state.launch = info
        self.state.status = SessionStatus.LAUNCH_READY
        self.logger.info(f"已获取启动信息: {info.game_host}:{info.game_port}")
        return info

    # =========================================================================
    # 内部实现 (Async)
    # =========================================================================

    async def _exchange(self, request: bytes, message_cls: type[M]) -> M:
        """发送一个请求并按指定报文类型解析一行答复。

        Raises:
            NetworkError: 发送或接收失败。
            ParseError: 答复不符合 `message_cls` 的语法。
        """
        tag = request[:1].decode("ascii")
        self.logger.debug(f"-> {tag} 请求 ({len(request)} 字节)")
        await self.net_client.send(request)

        line = await self.net_client.read_line()
        self.logger.debug(f"<- {message_cls.__name__} 答复 ({len(line)} 字符)")
        return message_cls.parse(line)

    def _require_authenticated(self) -> None:
        if not self.state.is_authenticated:
            raise StateError("尚未通过认证")
