# どこで: `src/pitschpatsch/core/parameters/classifier.py`。
# 何を: サイトを「どの関数の何番目の引数か」に分類し、ParameterDescriptor を作る。
# なぜ: GUI に人が読めるラベルを出し、RGB/XY のまとまりを検出できるようにするため。

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from pitschpatsch.core.analysis.lexer import LineIndex
from pitschpatsch.core.analysis.sites import NumericLiteralSite, Position, ReferenceSite, Site
from pitschpatsch.core.errors import ClassificationMiss

from .descriptor import (
    UNKNOWN_FUNCTION,
    ParameterDescriptor,
    make_function_id,
    make_value_key,
    param_type_for,
)
from .signatures import SignatureRegistry

_logger = logging.getLogger(__name__)

DEFAULT_WINDOW = 20

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {v: k for k, v in _OPENERS.items()}
_IDENT_CHARS = re.compile(r"[\w$]")


def _unmatched_open_paren(text: str, offset: int) -> int | None:
    """offset より前で閉じていない最も近い `(` の位置を返す。"""

    depth = 0
    for i in range(int(offset) - 1, -1, -1):
        ch = text[i]
        if ch in _CLOSERS:
            depth += 1
        elif ch in _OPENERS:
            if depth == 0:
                return i if ch == "(" else None
            depth -= 1
    return None


def _callee_start(text: str, paren: int) -> int:
    """`(` の直前にある識別子の開始位置を返す（無ければ paren）。"""

    j = paren
    while j > 0 and text[j - 1].isspace():
        j -= 1
    while j > 0 and _IDENT_CHARS.match(text[j - 1]):
        j -= 1
    return j


def _top_level_commas(segment: str) -> int:
    depth = 0
    count = 0
    for ch in segment:
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth = max(0, depth - 1)
        elif ch == "," and depth == 0:
            count += 1
    return count


class _NamePattern:
    """レジストリ名 + `(` の正規表現（レジストリ内容ごとにキャッシュ）。"""

    def __init__(self) -> None:
        self._names: tuple[str, ...] = ()
        self._regex: re.Pattern[str] | None = None

    def get(self, registry: SignatureRegistry) -> re.Pattern[str] | None:
        names = registry.names()
        if names != self._names:
            self._names = names
            self._regex = (
                re.compile(r"(?<![\w$])(" + "|".join(re.escape(n) for n in names) + r")\s*\(")
                if names
                else None
            )
        return self._regex


_PATTERN = _NamePattern()


def _heuristic(
    text: str, offset: int, registry: SignatureRegistry, window: int
) -> tuple[str | None, int, int | None]:
    """テキストからの推定。(関数名 or None, 引数位置, callee 開始オフセット) を返す。"""

    lo = max(0, int(offset) - int(window))
    paren = _unmatched_open_paren(text, offset)
    if paren is not None and paren < lo:
        lo = _callee_start(text, paren)
    segment = text[lo:offset]

    regex = _PATTERN.get(registry)
    matches = list(regex.finditer(segment)) if regex is not None else []
    chosen = None
    for m in reversed(matches):
        open_at = lo + m.end() - 1
        if _encloses(text, open_at, offset):
            chosen = m
            break
    if chosen is None and matches:
        chosen = matches[-1]

    if chosen is not None:
        open_at = lo + chosen.end() - 1
        ordinal = _top_level_commas(text[open_at + 1 : offset])
        return chosen.group(1), ordinal, lo + chosen.start(1)

    if paren is not None:
        return None, _top_level_commas(text[paren + 1 : offset]), _callee_start(text, paren)
    return None, 0, None


def _encloses(text: str, open_at: int, offset: int) -> bool:
    """text[open_at] の `(` が offset 時点でまだ閉じていないなら True。"""

    depth = 0
    for ch in text[open_at:offset]:
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
            if depth <= 0:
                return False
    return depth > 0


def classify(
    text: str,
    site: Site,
    registry: SignatureRegistry,
    *,
    window: int = DEFAULT_WINDOW,
    origin: Position | None = None,
    line_index: LineIndex | None = None,
) -> ParameterDescriptor:
    """サイトを分類して ParameterDescriptor を返す。

    例外は送出しない。解決できない場合は関数 `unknown`・名前 `param{ordinal}` に落とす。

    Parameters
    ----------
    text : str
        サイトを含むブロックのテキスト。
    site : NumericLiteralSite | ReferenceSite
        分類対象。
    registry : SignatureRegistry
        関数シグネチャ表。
    window : int
        テキスト推定で遡る文字数。
    origin : Position | None
        `text[0]` のドキュメント座標。None なら (0, 0)。
    """

    src = str(text)
    o = origin if origin is not None else Position(0, 0)
    index = line_index if line_index is not None else LineIndex(src)
    is_reference = isinstance(site, ReferenceSite)

    function_name: str | None = None
    ordinal = 0
    callee_offset: int | None = None

    ctx = site.context
    if ctx is not None and ctx.function_name in registry:
        function_name = ctx.function_name
        ordinal = ctx.argument_index
        callee_offset = ctx.call_offset
    else:
        function_name, ordinal, callee_offset = _heuristic(src, site.offset, registry, window)
        if function_name is None and ctx is not None:
            ordinal = ctx.argument_index
            callee_offset = ctx.call_offset

    param = registry.param(function_name, ordinal) if function_name is not None else None
    if param is None:
        miss = ClassificationMiss(
            f"site {site.index} ({site.raw_text!r} at line {site.line}, column {site.column}): "
            f"function={function_name or '?'} ordinal={ordinal}"
        )
        _logger.debug("classification miss: %s", miss)
        function_name = UNKNOWN_FUNCTION
        name = f"param{ordinal}"
        default = None
    else:
        name = param.name
        default = param.default

    if callee_offset is None:
        fn_line, fn_col = site.line, site.column
    else:
        line, col = index.position(callee_offset)
        fn_line = o.line + line
        fn_col = col + (o.ch if line == 0 else 0)

    choices: tuple[str, ...] = site.choices if isinstance(site, ReferenceSite) else ()
    value = site.value if isinstance(site, ReferenceSite) else float(site.value)
    return ParameterDescriptor(
        site_index=site.index,
        function_name=function_name,
        ordinal=int(ordinal),
        name=name,
        param_type=param_type_for(name, reference=is_reference),
        default=default,
        value=value,
        function_id=make_function_id(function_name, fn_line, fn_col),
        key=make_value_key(function_name, name, site.line, site.column),
        line=site.line,
        column=site.column,
        function_line=fn_line,
        function_column=fn_col,
        choices=choices,
    )


def classify_all(
    text: str,
    sites: Sequence[NumericLiteralSite | ReferenceSite],
    registry: SignatureRegistry,
    *,
    window: int = DEFAULT_WINDOW,
    origin: Position | None = None,
) -> list[ParameterDescriptor]:
    """sites を順に分類する（サイト 1 つにつき descriptor 1 つ）。"""

    index = LineIndex(str(text))
    return [
        classify(text, s, registry, window=window, origin=origin, line_index=index) for s in sites
    ]


__all__ = ["DEFAULT_WINDOW", "classify", "classify_all"]
