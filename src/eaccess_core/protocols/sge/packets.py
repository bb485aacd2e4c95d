# File: src/eaccess_core/protocols/sge/packets.py
"""
SGE (eAccess) 协议报文 (Messages)

每种报文对应线路上的一行文本:
- `parse(line)`: 将服务器响应行解析为强类型报文，失败抛出 ParseError。
- `encode(...)`: 构建客户端请求行 (bytes，含结尾换行符)。

请求与响应的语法相互独立，不要求互为逆运算。
编码路径不校验参数中是否含有分隔符，由调用方保证。

本模块是无状态的 (Stateless)，不持有任何配置或会话信息，也不输出日志。
"""

import abc
from dataclasses import dataclass
from typing import ClassVar

from ...exceptions import ParseError
from . import constants
from .constants import Tag
from .fields import (
    AccessTier,
    AccessTierField,
    Environment,
    EnvironmentField,
    Other,
    PaymentStatus,
    PaymentStatusField,
    Protocol,
    ProtocolField,
    to_text,
)
from .grammar import Cursor

__all__ = [
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
]


def _line(*fields: str) -> bytes:
    return (constants.TAB.join(fields) + constants.NEWLINE).encode("utf-8")


def _as_bytes(data: bytes | str) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


class Message(abc.ABC):
    """所有报文的公共解析入口。"""

    TAG: ClassVar[str] = ""

    @classmethod
    def parse(cls, line: str | bytes):
        """解析一整行 (必须包含结尾换行符，且不允许尾部残留数据)。

        Args:
            line: 服务器发送的一行，str 或 UTF-8 bytes。

        Returns:
            解析得到的报文实例。

        Raises:
            ParseError: 行不符合该报文的语法。
        """
        if isinstance(line, (bytes, bytearray)):
            try:
                line = bytes(line).decode("utf-8")
            except UnicodeDecodeError as e:
                raise ParseError(f"偏移 {e.start}: 期望 UTF-8 文本") from e

        cursor = Cursor(line)
        message = cls._parse(cursor)
        cursor.expect_end()
        return message

    @classmethod
    @abc.abstractmethod
    def _parse(cls, cursor: Cursor):
        """[Abstract] 从游标处读取报文主体。"""
        raise NotImplementedError

    @classmethod
    def _expect_tag(cls, cursor: Cursor) -> None:
        cursor.exact_literal(cls.TAG + constants.TAB)


# =========================================================================
# K: Hash Key
# =========================================================================


@dataclass(frozen=True)
class HashKey(Message):
    """K 报文：服务器下发的会话 Hash Key，用于混淆密码。"""

    TAG: ClassVar[str] = Tag.HASH_KEY

    key: str

    @staticmethod
    def encode() -> bytes:
        return b"K\n"

    @classmethod
    def _parse(cls, cursor: Cursor) -> "HashKey":
        # 响应没有标签，整行就是 Key；Key 中不允许出现 Tab
        start = cursor.pos
        key = cursor.final_token()
        if not key:
            raise cursor.fail("非空的 Hash Key", at=start)
        return cls(key=key)


# =========================================================================
# A: Auth
# =========================================================================


@dataclass(frozen=True)
class Auth(Message):
    """A 报文：认证成功的答复。

    认证失败时服务器的答复不含 `KEY` 段，解析会失败。
    """

    TAG: ClassVar[str] = Tag.AUTH

    account: str
    key: str
    name: str

    @staticmethod
    def encode(account: bytes | str, hashed_password: bytes) -> bytes:
        """构建认证请求: `A\\t<account>\\t<hashed password>\\n`。

        Args:
            account: 账号名。
            hashed_password: 经 `utils.hash_password` 混淆后的密码。
        """
        return b"A\t" + _as_bytes(account) + b"\t" + bytes(hashed_password) + b"\n"

    @classmethod
    def _parse(cls, cursor: Cursor) -> "Auth":
        cls._expect_tag(cursor)
        account = cursor.token_until(constants.TAB)
        cursor.exact_literal(constants.AUTH_KEY_LABEL)
        key = cursor.token_until(constants.TAB)
        name = cursor.final_token()
        return cls(account=account, key=key, name=name)


# =========================================================================
# M: Instance List
# =========================================================================


@dataclass(frozen=True)
class InstanceList(Message):
    """M 报文：账号可访问的实例 (游戏) 列表，按 (节点代码, 显示名) 排列。"""

    TAG: ClassVar[str] = Tag.INSTANCES

    instances: tuple[tuple[str, str], ...]

    @staticmethod
    def encode() -> bytes:
        return b"M\n"

    @classmethod
    def _parse(cls, cursor: Cursor) -> "InstanceList":
        cls._expect_tag(cursor)
        pairs = cursor.pairs(constants.TAB, min_count=1)
        return cls(instances=tuple(pairs))

    def find(self, node_or_name: str) -> tuple[str, str] | None:
        """按节点代码或显示名查找实例 (节点代码优先)。"""
        for entry in self.instances:
            if entry[0] == node_or_name:
                return entry
        for entry in self.instances:
            if entry[1] == node_or_name:
                return entry
        return None


# =========================================================================
# N: Node Info
# =========================================================================


@dataclass(frozen=True)
class NodeInfo(Message):
    """N 报文：`<环境>|<协议>[|<访问级别>]`。"""

    TAG: ClassVar[str] = Tag.NODE_INFO

    environment: EnvironmentField
    protocol: ProtocolField
    access: AccessTierField = AccessTier.NONE

    @staticmethod
    def encode(node: str) -> bytes:
        return _line(Tag.NODE_INFO, node)

    @classmethod
    def _parse(cls, cursor: Cursor) -> "NodeInfo":
        cls._expect_tag(cursor)
        environment = cursor.token_until(constants.PIPE)
        protocol, terminator = cursor.token_until_any(
            constants.PIPE + constants.NEWLINE
        )

        # 访问级别段连同前导 '|' 是可选的
        access = None
        if terminator == constants.PIPE:
            access = cursor.final_token()

        return cls(
            environment=Environment.from_text(environment),
            protocol=Protocol.from_text(protocol),
            access=AccessTier.from_text(access),
        )


# =========================================================================
# F: Payment Status
# =========================================================================


@dataclass(frozen=True)
class PaymentStatusMessage(Message):
    """F 报文：账号在该实例上的付费状态。"""

    TAG: ClassVar[str] = Tag.PAYMENT

    status: PaymentStatusField

    @staticmethod
    def encode(node: str) -> bytes:
        return _line(Tag.PAYMENT, node)

    @classmethod
    def _parse(cls, cursor: Cursor) -> "PaymentStatusMessage":
        cls._expect_tag(cursor)
        status = cursor.final_token()
        return cls(status=PaymentStatus.from_text(status))


# =========================================================================
# G: General Info
# =========================================================================


@dataclass(frozen=True)
class GeneralInfo(Message):
    """G 报文：实例的综合信息 (名称、付费模式以及一组 key=value 链接)。

    必须在 C 请求之前发送，服务器据此确定角色列表对应的实例。
    """

    TAG: ClassVar[str] = Tag.GENERAL_INFO

    name: str
    model: PaymentStatusField
    data: tuple[tuple[str, str], ...]

    @staticmethod
    def encode(node: str) -> bytes:
        return _line(Tag.GENERAL_INFO, node)

    @classmethod
    def _parse(cls, cursor: Cursor) -> "GeneralInfo":
        cls._expect_tag(cursor)
        name = cursor.token_until(constants.TAB)
        model = cursor.token_until(constants.TAB)
        cursor.exact_literal(constants.GENERAL_INFO_SEPARATOR)
        data = cursor.pairs(constants.EQUALS, min_count=1)
        return cls(name=name, model=PaymentStatus.from_text(model), data=tuple(data))

    def get(self, key: str, default: str | None = None) -> str | None:
        """返回第一个匹配 `key` 的值。"""
        for k, v in self.data:
            if k == key:
                return v
        return default


# =========================================================================
# P: Unknown Fields
# =========================================================================


@dataclass(frozen=True)
class UnknownFields(Message):
    """P 报文：6 个含义未知的字段，作为不透明字符串原样保留。"""

    TAG: ClassVar[str] = Tag.UNKNOWN

    p0: str
    p1: str
    p2: str
    p3: str
    p4: str
    p5: str

    @staticmethod
    def encode(node: str) -> bytes:
        return _line(Tag.UNKNOWN, node)

    @classmethod
    def _parse(cls, cursor: Cursor) -> "UnknownFields":
        cls._expect_tag(cursor)
        values = [cursor.token_until(constants.TAB) for _ in range(5)]
        values.append(cursor.final_token())
        return cls(*values)


# =========================================================================
# C: Character List
# =========================================================================


@dataclass(frozen=True)
class CharacterList(Message):
    """C 报文：当前实例下的角色列表。

    C 请求本身不带实例参数，必须先发送 `GeneralInfo.encode(node)`。
    """

    TAG: ClassVar[str] = Tag.CHARACTERS

    num_characters: int
    max_characters: int
    # 以下两个数值含义未知，原样保留
    n0: int
    n1: int
    characters: tuple[tuple[str, str], ...] = ()

    @staticmethod
    def encode() -> bytes:
        return b"C\n"

    @classmethod
    def _parse(cls, cursor: Cursor) -> "CharacterList":
        cls._expect_tag(cursor)
        numbers = []
        for _ in range(3):
            numbers.append(cursor.unsigned_integer())
            cursor.expect_terminator(constants.TAB)
        numbers.append(cursor.unsigned_integer())

        characters: list[tuple[str, str]] = []
        if cursor.expect_terminator(constants.END_OF_FIELD) == constants.TAB:
            characters = cursor.pairs(constants.TAB, min_count=1)

        num_characters, max_characters, n0, n1 = numbers
        return cls(
            num_characters=num_characters,
            max_characters=max_characters,
            n0=n0,
            n1=n1,
            characters=tuple(characters),
        )

    def find(self, id_or_name: str) -> tuple[str, str] | None:
        """按角色 ID 或角色名 (不区分大小写) 查找角色。"""
        for entry in self.characters:
            if entry[0] == id_or_name:
                return entry
        for entry in self.characters:
            if entry[1].lower() == id_or_name.lower():
                return entry
        return None


# =========================================================================
# L: Launch Info
# =========================================================================


@dataclass(frozen=True)
class LaunchInfo(Message):
    """L 报文：握手的最终答复，包含连接游戏服务器所需的主机、端口与 Key。"""

    TAG: ClassVar[str] = Tag.LAUNCH

    upport: int
    game: str
    game_code: str
    full_game_name: str
    game_file: str
    game_host: str
    game_port: int
    key: str

    @staticmethod
    def encode(character_id: str, protocol: ProtocolField | str = Protocol.STORM) -> bytes:
        """构建启动请求: `L\\t<character id>\\t<protocol>\\n`。"""
        if isinstance(protocol, (Protocol, Other)):
            protocol = to_text(protocol)
        return _line(Tag.LAUNCH, character_id, protocol)

    @classmethod
    def _parse(cls, cursor: Cursor) -> "LaunchInfo":
        cls._expect_tag(cursor)
        cursor.exact_literal(constants.LAUNCH_OK)

        cursor.exact_literal(constants.LAUNCH_UPPORT)
        upport = cursor.unsigned_integer()
        cursor.expect_terminator(constants.TAB)

        def labelled(label: str) -> str:
            cursor.exact_literal(label)
            return cursor.token_until(constants.TAB)

        game = labelled(constants.LAUNCH_GAME)
        game_code = labelled(constants.LAUNCH_GAMECODE)
        full_game_name = labelled(constants.LAUNCH_FULLGAMENAME)
        game_file = labelled(constants.LAUNCH_GAMEFILE)
        game_host = labelled(constants.LAUNCH_GAMEHOST)

        cursor.exact_literal(constants.LAUNCH_GAMEPORT)
        game_port = cursor.unsigned_integer()
        cursor.expect_terminator(constants.TAB)

        cursor.exact_literal(constants.LAUNCH_KEY)
        key = cursor.final_token()

        return cls(
            upport=upport,
            game=game,
            game_code=game_code,
            full_game_name=full_game_name,
            game_file=game_file,
            game_host=game_host,
            game_port=game_port,
            key=key,
        )

    @property
    def endpoint(self) -> tuple[str, int]:
        """游戏服务器地址 (game_host, game_port)。"""
        return self.game_host, self.game_port

    def __repr__(self) -> str:
        """隐藏会话 Key，防止日志泄露。"""
        return (
            f"<{self.__class__.__name__} "
            f"game={self.game_code} "
            f"host={self.game_host}:{self.game_port} key='******'>"
        )
