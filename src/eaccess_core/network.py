# src/eaccess_core/network.py
"""
eAccess 核心库 - 网络模块 (Network) [Asyncio Edition]

封装 TCP 连接的建立、按行接收与发送逻辑。
该模块屏蔽了底层 Stream 的复杂性，向策略层提供
"发送一串 bytes" 与 "读取完整一行" 两个接口。
"""

import asyncio
import logging

from .config import EAccessConfig
from .exceptions import NetworkError, ProtocolError

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT = 10.0


class LineClient:
    """
    封装 asyncio TCP 操作的按行收发客户端。
    """

    def __init__(self, config: EAccessConfig):
        self.config = config
        self.reader: asyncio.StreamReader | None = None
        self.writer: asyncio.StreamWriter | None = None

    @property
    def connected(self) -> bool:
        return self.writer is not None and not self.writer.is_closing()

    async def connect(self) -> None:
        """
        建立到 eAccess 服务器的 TCP 连接。
        """
        target = (self.config.host, self.config.port)
        try:
            self.reader, self.writer = await asyncio.wait_for(
                asyncio.open_connection(*target), timeout=CONNECT_TIMEOUT
            )
            logger.debug(f"TCP 连接已建立: {target}")
        except asyncio.TimeoutError:
            await self.close()
            raise NetworkError(f"连接超时 {target}") from None
        except OSError as e:
            await self.close()
            raise NetworkError(f"连接失败 {target}: {e}") from e

    async def send(self, data: bytes) -> None:
        """
        原样发送编码器生成的字节序列。
        """
        if not self.connected:
            raise NetworkError("连接未建立或已关闭")

        assert self.writer is not None

        try:
            self.writer.write(data)
            await self.writer.drain()
        except (OSError, ConnectionError) as e:
            raise NetworkError(f"发送失败: {e}") from e

    async def read_line(self, timeout: float | None = None) -> str:
        """
        读取完整的一行 (包含结尾的换行符)。

        Args:
            timeout: 超时秒数，默认使用配置中的 timeout。

        Raises:
            NetworkError: 超时，或连接在换行符之前结束。
            ProtocolError: 该行不是合法的 UTF-8 文本。
        """
        if not self.reader:
            raise NetworkError("连接未建立")

        if timeout is None:
            timeout = self.config.timeout

        try:
            raw = await asyncio.wait_for(self.reader.readline(), timeout=timeout)
        except asyncio.TimeoutError:
            raise NetworkError(f"接收超时 ({timeout}s)") from None
        except (OSError, ConnectionError, ValueError) as e:
            # ValueError: 单行超过 StreamReader 缓冲区上限
            raise NetworkError(f"接收错误: {e}") from e

        if not raw.endswith(b"\n"):
            raise NetworkError("连接在行结束之前关闭")

        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProtocolError(f"答复不是合法的 UTF-8 文本: {e}") from e

    async def close(self) -> None:
        """关闭连接"""
        if self.writer:
            writer = self.writer
            self.writer = None
            self.reader = None
            writer.close()
            try:
                await writer.wait_closed()
            except (OSError, ConnectionError) as e:
                logger.debug(f"关闭连接时出错: {e}")
            logger.debug("TCP 连接已关闭")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
