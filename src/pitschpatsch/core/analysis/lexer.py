# どこで: `src/pitschpatsch/core/analysis/lexer.py`。
# 何を: ライブコーディング用 JavaScript サブセットのトークナイザを提供する。
# なぜ: 文字列/コメント内の数字を数値リテラルと誤認しないため、生テキストの正規表現ではなく字句解析を通す。

from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass
from typing import Literal

from pitschpatsch.core.errors import ParseError

TokenKind = Literal["ident", "number", "string", "template", "punct", "comment", "eof"]

_NUMBER_RE = re.compile(
    r"0[xX][0-9a-fA-F](?:_?[0-9a-fA-F])*"
    r"|0[bB][01](?:_?[01])*"
    r"|0[oO][0-7](?:_?[0-7])*"
    r"|(?:\d(?:_?\d)*\.?(?:\d(?:_?\d)*)?(?:[eE][+-]?\d(?:_?\d)*)?)"
    r"|(?:\.\d(?:_?\d)*(?:[eE][+-]?\d(?:_?\d)*)?)"
)
_IDENT_RE = re.compile(r"[A-Za-z_$][\w$]*")

# 長いものから順に照合する。
_PUNCTUATORS: tuple[str, ...] = (
    ">>>=",
    "===",
    "!==",
    "**=",
    "...",
    ">>>",
    "<<=",
    ">>=",
    "=>",
    "==",
    "!=",
    "<=",
    ">=",
    "&&",
    "||",
    "??",
    "?.",
    "++",
    "--",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "**",
    "<<",
    ">>",
    "&=",
    "|=",
    "^=",
    "{",
    "}",
    "(",
    ")",
    "[",
    "]",
    ";",
    ",",
    ".",
    "<",
    ">",
    "+",
    "-",
    "*",
    "/",
    "%",
    "&",
    "|",
    "^",
    "!",
    "~",
    "?",
    ":",
    "=",
)


@dataclass(frozen=True, slots=True)
class Token:
    """1 トークン。start/end は文字オフセット（end は排他的）。"""

    kind: TokenKind
    text: str
    start: int
    end: int
    line: int
    column: int
    newline_before: bool = False


class LineIndex:
    """オフセット ↔ (line, column) の変換表。"""

    def __init__(self, text: str) -> None:
        starts = [0]
        for i, ch in enumerate(text):
            if ch == "\n":
                starts.append(i + 1)
        self._starts = starts

    def position(self, offset: int) -> tuple[int, int]:
        """offset の 0-based (line, column) を返す。"""

        line = bisect_right(self._starts, int(offset)) - 1
        return line, int(offset) - self._starts[line]

    def offset(self, line: int, column: int) -> int:
        """0-based (line, column) の offset を返す。"""

        return self._starts[int(line)] + int(column)

    @property
    def line_count(self) -> int:
        return len(self._starts)


def tokenize(text: str, *, keep_comments: bool = True) -> list[Token]:
    """text をトークン列へ分解して返す（末尾は eof）。

    Raises
    ------
    ParseError
        閉じていない文字列/コメント、または未知の文字。
    """

    index = LineIndex(text)
    tokens: list[Token] = []
    pos = 0
    n = len(text)
    newline_before = False

    def make(kind: TokenKind, start: int, end: int) -> Token:
        line, column = index.position(start)
        return Token(kind, text[start:end], start, end, line, column, newline_before)

    def fail(message: str, at: int) -> ParseError:
        line, column = index.position(at)
        return ParseError(message, line=line, column=column, offset=at)

    while pos < n:
        ch = text[pos]

        if ch == "\n":
            newline_before = True
            pos += 1
            continue
        if ch in " \t\r\f\v\ufeff":
            pos += 1
            continue

        # --- コメント ---
        if text.startswith("//", pos):
            end = text.find("\n", pos)
            end = n if end < 0 else end
            if keep_comments:
                tokens.append(make("comment", pos, end))
            pos = end
            continue
        if text.startswith("/*", pos):
            end = text.find("*/", pos + 2)
            if end < 0:
                raise fail("unterminated block comment", pos)
            if "\n" in text[pos:end]:
                newline_before = True
            if keep_comments:
                tokens.append(make("comment", pos, end + 2))
            pos = end + 2
            continue

        # --- 数値（`.5` を含む。`a.b` の `.` と区別するため直後の数字で判定） ---
        if ch.isdigit() or (ch == "." and pos + 1 < n and text[pos + 1].isdigit()):
            m = _NUMBER_RE.match(text, pos)
            if m is None:  # pragma: no cover
                raise fail("invalid number", pos)
            end = m.end()
            if end < n and (text[end].isalpha() or text[end] in "_$"):
                raise fail("identifier starts immediately after numeric literal", end)
            tokens.append(make("number", pos, end))
            newline_before = False
            pos = end
            continue

        # --- 識別子 ---
        m = _IDENT_RE.match(text, pos)
        if m is not None:
            tokens.append(make("ident", pos, m.end()))
            newline_before = False
            pos = m.end()
            continue

        # --- 文字列 ---
        if ch in "'\"":
            end = _scan_string(text, pos, ch)
            if end < 0:
                raise fail("unterminated string literal", pos)
            tokens.append(make("string", pos, end))
            newline_before = False
            pos = end
            continue
        if ch == "`":
            end = _scan_template(text, pos)
            if end < 0:
                raise fail("unterminated template literal", pos)
            tokens.append(make("template", pos, end))
            newline_before = False
            pos = end
            continue

        # --- 記号 ---
        for punct in _PUNCTUATORS:
            if text.startswith(punct, pos):
                # `?.5` は optional chaining ではなく条件演算子 + 数値。
                if punct == "?." and pos + 2 < n and text[pos + 2].isdigit():
                    continue
                tokens.append(make("punct", pos, pos + len(punct)))
                newline_before = False
                pos += len(punct)
                break
        else:
            raise fail(f"unexpected character {ch!r}", pos)

    tokens.append(make("eof", n, n))
    return tokens


def _scan_string(text: str, pos: int, quote: str) -> int:
    """pos の引用符から始まる文字列の終端（排他的）を返す。閉じていなければ -1。"""

    i = pos + 1
    n = len(text)
    while i < n:
        c = text[i]
        if c == "\\":
            i += 2
            continue
        if c == quote:
            return i + 1
        if c == "\n":
            return -1
        i += 1
    return -1


def _scan_template(text: str, pos: int) -> int:
    """テンプレート文字列の終端を返す。`${...}` の入れ子を考慮する。"""

    i = pos + 1
    n = len(text)
    depth = 0
    while i < n:
        c = text[i]
        if c == "\\":
            i += 2
            continue
        if depth == 0:
            if c == "`":
                return i + 1
            if text.startswith("${", i):
                depth = 1
                i += 2
                continue
        else:
            if c == "{":
                depth += 1
            elif c == "}":
                depth -= 1
            elif c in "'\"":
                end = _scan_string(text, i, c)
                if end < 0:
                    return -1
                i = end
                continue
        i += 1
    return -1


__all__ = ["Token", "TokenKind", "LineIndex", "tokenize"]
