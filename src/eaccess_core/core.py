# File: src/eaccess_core/core.py
"""
eAccess 核心引擎 (Core Engine)

职责：
1. 资源组装：State + Network + Config。
2. 策略分发。
3. 生命周期：Connect -> Login -> Select Instance -> Launch -> Stop。
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import Any

from .config import EAccessConfig
from .exceptions import AuthError, EAccessError, ProtocolError
from .network import LineClient
from .protocols.sge import ProtocolSGE
from .protocols.sge.packets import CharacterList, InstanceList, LaunchInfo
from .state import SessionState, SessionStatus

logger = logging.getLogger(__name__)

# 定义回调函数类型别名：支持同步或异步函数
StatusCallback = Callable[[SessionStatus, str], Any | Awaitable[Any]]


class EAccessCore:
    """eAccess 握手核心引擎 (Async)。"""

    def __init__(
        self,
        config: EAccessConfig,
        status_callback: StatusCallback | None = None,
    ) -> None:
        """初始化核心引擎。

        Args:
            config: 全局配置对象。
            status_callback: 初始状态回调。也可以之后通过 add_listener 注册。
        """
        self.config = config

        self._listeners: list[StatusCallback] = []
        if status_callback:
            self.add_listener(status_callback)

        self._state = SessionState()
        self.net_client = LineClient(config)
        self.protocol = ProtocolSGE(self.config, self._state, self.net_client)

        self._update_status(SessionStatus.IDLE, "引擎已就绪")

    @property
    def state(self) -> SessionState:
        """获取当前会话状态的副本。

        返回的是一个副本 (Copy)，修改它不会影响引擎内部状态。
        """
        return replace(self._state)

    def add_listener(self, callback: StatusCallback) -> None:
        """注册状态变更监听器。"""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: StatusCallback) -> None:
        """移除状态变更监听器。"""
        if callback in self._listeners:
            self._listeners.remove(callback)

    async def login(self) -> bool:
        """建立连接并执行认证 (K -> A)。

        Returns:
            bool: 认证成功返回 True。

        Raises:
            AuthError: 认证被拒绝。
            NetworkError: 网络通信异常。
            EAccessError: 其他不可恢复的错误 (如答复无法解析)。
        """
        if self._state.is_authenticated:
            logger.warning("当前已通过认证，跳过登录")
            return True

        self._update_status(SessionStatus.CONNECTING, "正在连接并认证...")

        try:
            if not self.net_client.connected:
                await self.net_client.connect()
            await self.protocol.login()
        except AuthError as ae:
            self._fail(f"认证被拒绝: {ae}", ae)
            raise
        except EAccessError as e:
            # 握手没有重新同步机制，任何错误都会终止本次会话
            self._fail(f"认证异常: {e}", e)
            raise

        self._update_status(SessionStatus.AUTHENTICATED, "认证成功")
        return True

    async def list_instances(self) -> InstanceList:
        """查询账号可访问的实例列表。"""
        return await self._guard(self.protocol.list_instances())

    async def list_characters(self, node: str) -> CharacterList:
        """选定实例并查询角色列表。"""
        characters = await self._guard(self.protocol.list_characters(node))
        self._update_status(SessionStatus.INSTANCE_SELECTED, f"已选定实例 {node}")
        return characters

    async def launch(self, character_id: str) -> LaunchInfo:
        """为指定角色获取启动信息。"""
        info = await self._guard(self.protocol.launch(character_id))
        self._update_status(
            SessionStatus.LAUNCH_READY,
            f"启动信息就绪: {info.game_host}:{info.game_port}",
        )
        return info

    async def handshake(self) -> LaunchInfo:
        """按配置执行完整握手流程，返回启动信息。

        流程: 认证 -> 实例列表 -> 选定配置的实例 -> 角色列表 -> 选定角色 -> 启动信息。

        Raises:
            AuthError: 认证被拒绝。
            ProtocolError: 找不到配置的实例或角色，或答复无法解析。
            NetworkError: 网络通信异常。
        """
        await self.login()

        instances = await self.list_instances()
        instance = instances.find(self.config.game)
        if instance is None:
            available = ", ".join(f"{n} ({name})" for n, name in instances.instances)
            err = ProtocolError(f"找不到实例 '{self.config.game}'，可用实例: {available}")
            self._fail(str(err), err)
            raise err

        node, name = instance
        logger.info(f"选定实例: {node} ({name})")
        characters = await self.list_characters(node)

        if not characters.characters:
            err = ProtocolError(f"实例 {node} 下没有任何角色")
            self._fail(str(err), err)
            raise err

        if self.config.character:
            character = characters.find(self.config.character)
            if character is None:
                err = ProtocolError(f"找不到角色 '{self.config.character}'")
                self._fail(str(err), err)
                raise err
        else:
            character = characters.characters[0]

        character_id, character_name = character
        logger.info(f"选定角色: {character_name} ({character_id})")
        return await self.launch(character_id)

    async def stop(self) -> None:
        """停止引擎并关闭连接。"""
        await self.net_client.close()
        self._update_status(SessionStatus.CLOSED, "已停止")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()

    async def _guard(self, coro: Awaitable[Any]) -> Any:
        """执行一次协议交互，出错时记录状态后向上冒泡。"""
        try:
            return await coro
        except EAccessError as e:
            self._fail(f"交互异常: {e}", e)
            raise

    def _fail(self, msg: str, error: Exception) -> None:
        self._state.last_error = str(error)
        self._update_status(SessionStatus.ERROR, msg)

    def _update_status(self, status: SessionStatus, msg: str) -> None:
        """更新内部状态并触发所有回调。"""
        self._state.status = status
        logger.info(f"[{status.name}] {msg}")

        for callback in self._listeners:
            try:
                if inspect.iscoroutinefunction(callback):
                    # 如果是 async def 定义的协程，创建 Task 执行
                    coro = callback(status, msg)
                    try:
                        asyncio.create_task(coro)  # type: ignore
                    except RuntimeError:
                        # 应对 loop 尚未运行的边缘情况 (如在 __init__ 中触发)
                        coro.close()  # type: ignore
                        logger.debug(f"回调未执行 (事件循环未运行): {callback!r}")
                else:
                    callback(status, msg)
            except Exception as e:
                logger.error(f"回调执行异常: {e}")
