# どこで: `src/pitschpatsch/core/analysis/__init__.py`。
# 何を: 字句/構文解析とサイト抽出の公開エイリアスをまとめる。
# なぜ: 上位層から最小インポートで使えるようにするため。

from .lexer import LineIndex, Token, tokenize
from .sites import (
    CallContext,
    EvalRange,
    NumericLiteralSite,
    Position,
    ReferenceSite,
    Site,
    SourceBlock,
    collect_sites,
    find_numeric_literals,
    find_reference_sites,
)
from .syntax import Program, parse, walk

__all__ = [
    "LineIndex",
    "Token",
    "tokenize",
    "CallContext",
    "EvalRange",
    "NumericLiteralSite",
    "Position",
    "ReferenceSite",
    "Site",
    "SourceBlock",
    "collect_sites",
    "find_numeric_literals",
    "find_reference_sites",
    "Program",
    "parse",
    "walk",
]
