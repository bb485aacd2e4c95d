# src/eaccess_core/protocols/sge/grammar.py
"""
SGE 协议语法原语 (Grammar Primitives)

所有报文解析器共享的单行游标。语法是"寻找分隔符"式的，不存在转义：
字段内容不能包含结束它的分隔符。

本模块是无状态的工具层，不进行日志输出，不涉及任何 I/O。
"""

from ...exceptions import ParseError
from . import constants


def _describe(chars: str) -> str:
    return " 或 ".join(repr(c) for c in chars)


class Cursor:
    """单行文本上的解析游标。

    每个原语要么推进游标并返回结果，要么抛出 ParseError
    (失败后游标位置不作保证，需要回溯的调用方自行保存 `pos`)。
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        # 最近一次被重复解析吞掉的失败原因，供 expect_end 合并报告
        self._swallowed: ParseError | None = None

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def fail(self, expected: str, at: int | None = None) -> ParseError:
        """构造一个描述"期望什么、在哪里"的 ParseError。"""
        offset = self.pos if at is None else at
        found = repr(self.text[offset]) if offset < len(self.text) else "行尾"
        return ParseError(f"偏移 {offset}: 期望 {expected}，实际为 {found}")

    def token_until_any(self, terminators: str) -> tuple[str, str]:
        """读取到任一结束符为止的字段，并返回 (字段, 结束符)。

        Raises:
            ParseError: 行尾之前没有出现任何结束符。
        """
        start = self.pos
        end = start
        length = len(self.text)
        while end < length and self.text[end] not in terminators:
            end += 1

        if end >= length:
            raise self.fail(f"以 {_describe(terminators)} 结束的字段", at=end)

        self.pos = end + 1
        return self.text[start:end], self.text[end]

    def token_until(self, terminators: str) -> str:
        """读取不含结束符的最长字段，并消耗紧随其后的一个结束符。"""
        token, _ = self.token_until_any(terminators)
        return token

    def final_token(self) -> str:
        """读取行内最后一个字段 (以换行结束，且不含 Tab)。"""
        token, terminator = self.token_until_any(constants.END_OF_FIELD)
        if terminator != constants.NEWLINE:
            raise self.fail("换行符 (行内最后一个字段)", at=self.pos - 1)
        return token

    def unsigned_integer(self) -> int:
        """读取十进制无符号整数 (u64)。

        空数字串被视为解析失败，而不是 0。

        Raises:
            ParseError: 没有数字，或数值超过 64 位上限。
        """
        start = self.pos
        end = start
        length = len(self.text)
        while end < length and self.text[end] in "0123456789":
            end += 1

        if end == start:
            raise self.fail("至少一位十进制数字")

        value = int(self.text[start:end])
        if value > constants.UINT64_MAX:
            raise self.fail("不超过 64 位的无符号整数", at=start)

        self.pos = end
        return value

    def exact_literal(self, literal: str) -> None:
        """要求输入以 `literal` 开头并消耗它。"""
        if not self.text.startswith(literal, self.pos):
            raise self.fail(repr(literal))
        self.pos += len(literal)

    def expect_terminator(self, terminators: str) -> str:
        """消耗一个结束符并返回它。"""
        if self.at_end or self.text[self.pos] not in terminators:
            raise self.fail(_describe(terminators))
        char = self.text[self.pos]
        self.pos += 1
        return char

    def expect_end(self) -> None:
        """要求整行已被完全消耗。

        如果此前的重复解析吞掉过一次失败，该原因会与尾部数据错误一并报告。
        """
        if self.at_end:
            return

        reasons = list(self.fail("行尾 (存在未消耗的尾部数据)").reasons)
        if self._swallowed is not None:
            reasons.extend(self._swallowed.reasons)
        raise ParseError(reasons)

    def pairs(
        self,
        first_terminators: str,
        second_terminators: str = constants.END_OF_FIELD,
        *,
        min_count: int = 0,
    ) -> list[tuple[str, str]]:
        """贪婪地读取 (字段, 字段) 对，直到某一对无法匹配或遇到换行。

        每一对都是原子的：匹配失败时游标回到这一对的起点。
        第二个字段以 Tab 结束表示后面还有更多对，以换行结束表示最后一对。
        读取结束后要求最后一个结束符必须是换行符。

        Args:
            first_terminators: 第一个字段的结束符集合。
            second_terminators: 第二个字段的结束符集合。
            min_count: 至少需要匹配的对数。

        Returns:
            list[tuple[str, str]]: 按出现顺序排列的字段对。

        Raises:
            ParseError: 匹配对数不足，或最后一对不以换行结束。
        """
        result: list[tuple[str, str]] = []
        terminator = ""

        while True:
            mark = self.pos
            try:
                first = self.token_until(first_terminators)
                second, terminator = self.token_until_any(second_terminators)
            except ParseError as e:
                self.pos = mark
                self._swallowed = e
                if len(result) < min_count:
                    raise
                break

            result.append((first, second))
            if terminator == constants.NEWLINE:
                break

        if result and terminator != constants.NEWLINE:
            reasons = list(self.fail("以换行符结束的字段对").reasons)
            if self._swallowed is not None:
                reasons.extend(self._swallowed.reasons)
            raise ParseError(reasons)

        return result
