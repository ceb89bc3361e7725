# どこで: `src/pitschpatsch/core/analysis/sites.py`。
# 何を: 評価範囲内の数値リテラル/出力・ソース参照を「サイト」として抽出する。
# なぜ: サイトの index（オフセット昇順）が GUI コントロールとコード再生成を結ぶ唯一のキーになるため。

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Literal

from .lexer import LineIndex
from .syntax import (
    CallExpression,
    Identifier,
    MemberExpression,
    Node,
    NumericLiteral,
    Program,
    Property,
    UnaryExpression,
    parse,
    walk,
)

DEFAULT_SKIP_MARKERS: tuple[str, ...] = ("loadScript",)
DEFAULT_OUTPUTS: tuple[str, ...] = ("o0", "o1", "o2", "o3")
DEFAULT_SOURCES: tuple[str, ...] = ("s0", "s1", "s2", "s3")


@dataclass(frozen=True, slots=True, order=True)
class Position:
    """ドキュメント上の 0-based (line, ch)。"""

    line: int
    ch: int


@dataclass(frozen=True, slots=True)
class EvalRange:
    """現在「ライブ」なテキスト範囲。"""

    start: Position
    end: Position

    def admits(self, start: Position, end: Position) -> bool:
        """[start, end) のリテラルが範囲内なら True。

        境界（start/end と同じ位置で始まるもの）は含めない。
        """

        return self.start < start < self.end and end <= self.end

    @classmethod
    def covering(cls, text: str, *, origin: Position | None = None) -> EvalRange:
        """text 全体を覆う範囲を返す。"""

        o = origin if origin is not None else Position(0, 0)
        lines = str(text).split("\n")
        last = len(lines) - 1
        end_ch = len(lines[-1]) + (o.ch if last == 0 else 0)
        return cls(o, Position(o.line + last, end_ch))


@dataclass(frozen=True, slots=True)
class SourceBlock:
    """評価対象のテキストと、その範囲。"""

    text: str
    eval_range: EvalRange


@dataclass(frozen=True, slots=True)
class CallContext:
    """サイトを直接引数に持つ呼び出しの情報。

    call_offset はブロック先頭からの callee 名の開始オフセット。
    """

    function_name: str
    argument_index: int
    call_offset: int


@dataclass(frozen=True, slots=True)
class NumericLiteralSite:
    """1 つの数値リテラル。

    offset/length はブロックテキスト内の置換スパン、line/column はドキュメント座標。
    """

    index: int
    raw_text: str
    value: float
    line: int
    column: int
    length: int
    offset: int
    context: CallContext | None = None


ReferenceKind = Literal["output", "source"]


@dataclass(frozen=True, slots=True)
class ReferenceSite:
    """呼び出し引数として使われた出力/ソース識別子（`o0`, `s1` など）。"""

    index: int
    name: str
    kind: ReferenceKind
    choices: tuple[str, ...]
    line: int
    column: int
    length: int
    offset: int
    context: CallContext | None = None

    @property
    def raw_text(self) -> str:
        return self.name

    @property
    def value(self) -> str:
        return self.name


Site = NumericLiteralSite | ReferenceSite


def _callee_name(call: CallExpression) -> tuple[str, int] | None:
    callee = call.callee
    if isinstance(callee, Identifier):
        return callee.name, callee.start
    if isinstance(callee, MemberExpression) and not callee.computed:
        prop = callee.property
        if isinstance(prop, Identifier):
            return prop.name, prop.start
    return None


def _call_context(node: Node, parents: tuple[Node, ...]) -> CallContext | None:
    if not parents:
        return None
    parent = parents[-1]
    if not isinstance(parent, CallExpression):
        return None
    for i, arg in enumerate(parent.arguments):
        if arg is node:
            named = _callee_name(parent)
            if named is None:
                return None
            return CallContext(named[0], i, named[1])
    return None


class _Locator:
    """ブロック内オフセット → ドキュメント座標、およびスキップ行判定。"""

    def __init__(self, text: str, origin: Position, skip_markers: Iterable[str]) -> None:
        self._index = LineIndex(text)
        self._lines = text.split("\n")
        self._origin = origin
        markers = tuple(str(m) for m in skip_markers if str(m))
        self._skipped = {
            i for i, line in enumerate(self._lines) if any(m in line for m in markers)
        }

    def document_position(self, offset: int) -> Position:
        line, col = self._index.position(offset)
        if line == 0:
            col += self._origin.ch
        return Position(self._origin.line + line, col)

    def skipped(self, offset: int) -> bool:
        line, _col = self._index.position(offset)
        return line in self._skipped


def _origin_for(eval_range: EvalRange | None, origin: Position | None) -> Position:
    if origin is not None:
        return origin
    if eval_range is not None:
        return eval_range.start
    return Position(0, 0)


def _numeric_candidates(program: Program, text: str):
    for node, parents in walk(program):
        if not isinstance(node, NumericLiteral):
            continue
        if parents and isinstance(parents[-1], Property):
            prop = parents[-1]
            if prop.key is node and not prop.computed:
                continue
        if parents:
            parent = parents[-1]
            # 符号付きの値は、符号の位置から 1 サイトとして扱う。
            if (
                isinstance(parent, UnaryExpression)
                and parent.operator in {"-", "+"}
                and parent.argument is node
                and not text[parent.start + 1 : node.start].strip()
            ):
                value = -node.value if parent.operator == "-" else node.value
                yield parent, text[parent.start : node.end], value, parents[:-1]
                continue
        yield node, node.raw, node.value, parents


def find_numeric_literals(
    text: str,
    eval_range: EvalRange | None,
    *,
    origin: Position | None = None,
    program: Program | None = None,
    skip_markers: Sequence[str] = DEFAULT_SKIP_MARKERS,
) -> list[NumericLiteralSite]:
    """評価範囲内の数値リテラルをオフセット昇順で返す。

    Parameters
    ----------
    text : str
        ブロックのテキスト。
    eval_range : EvalRange | None
        ドキュメント座標での評価範囲。
    origin : Position | None
        `text[0]` のドキュメント座標。None なら `eval_range.start`（範囲も None なら (0, 0)）。
    program : Program | None
        解析済み AST。None なら `parse(text)` する（ParseError は呼び出し側へ伝播）。
    skip_markers : Sequence[str]
        これらを含む行のリテラルは無視する。

    Returns
    -------
    list[NumericLiteralSite]
        index は 0..N-1。
    """

    src = str(text)
    tree = program if program is not None else parse(src)
    locator = _Locator(src, _origin_for(eval_range, origin), skip_markers)

    found: list[tuple[int, int, str, float, CallContext | None]] = []
    for node, raw, value, parents in _numeric_candidates(tree, src):
        if locator.skipped(node.start):
            continue
        start = locator.document_position(node.start)
        end = locator.document_position(node.end)
        if eval_range is not None and not eval_range.admits(start, end):
            continue
        found.append((node.start, node.end, raw, value, _call_context(node, parents)))

    found.sort(key=lambda item: item[0])
    sites: list[NumericLiteralSite] = []
    for i, (start_off, end_off, raw, value, ctx) in enumerate(found):
        pos = locator.document_position(start_off)
        sites.append(
            NumericLiteralSite(
                index=i,
                raw_text=raw,
                value=float(value),
                line=pos.line,
                column=pos.ch,
                length=end_off - start_off,
                offset=start_off,
                context=ctx,
            )
        )
    return sites


def find_reference_sites(
    text: str,
    eval_range: EvalRange | None,
    *,
    first_index: int = 0,
    origin: Position | None = None,
    program: Program | None = None,
    outputs: Sequence[str] = DEFAULT_OUTPUTS,
    sources: Sequence[str] = DEFAULT_SOURCES,
    skip_markers: Sequence[str] = DEFAULT_SKIP_MARKERS,
) -> list[ReferenceSite]:
    """呼び出し引数として現れる出力/ソース識別子を返す。

    index は `first_index` から連番（数値サイトの後ろに続く）。
    """

    src = str(text)
    tree = program if program is not None else parse(src)
    locator = _Locator(src, _origin_for(eval_range, origin), skip_markers)
    output_names = tuple(str(o) for o in outputs)
    source_names = tuple(str(s) for s in sources)

    found: list[tuple[Identifier, ReferenceKind, CallContext]] = []
    for node, parents in walk(tree):
        if not isinstance(node, Identifier):
            continue
        if node.name in output_names:
            kind: ReferenceKind = "output"
        elif node.name in source_names:
            kind = "source"
        else:
            continue
        ctx = _call_context(node, parents)
        if ctx is None or locator.skipped(node.start):
            continue
        start = locator.document_position(node.start)
        end = locator.document_position(node.end)
        if eval_range is not None and not eval_range.admits(start, end):
            continue
        found.append((node, kind, ctx))

    found.sort(key=lambda item: item[0].start)
    sites: list[ReferenceSite] = []
    for i, (node, kind, ctx) in enumerate(found):
        pos = locator.document_position(node.start)
        sites.append(
            ReferenceSite(
                index=int(first_index) + i,
                name=node.name,
                kind=kind,
                choices=output_names if kind == "output" else source_names,
                line=pos.line,
                column=pos.ch,
                length=node.end - node.start,
                offset=node.start,
                context=ctx,
            )
        )
    return sites


def collect_sites(
    text: str,
    eval_range: EvalRange | None = None,
    *,
    origin: Position | None = None,
    program: Program | None = None,
    outputs: Sequence[str] = DEFAULT_OUTPUTS,
    sources: Sequence[str] = DEFAULT_SOURCES,
    skip_markers: Sequence[str] = DEFAULT_SKIP_MARKERS,
) -> list[Site]:
    """数値サイト（0..N-1）と参照サイト（N..N+M-1）を index 順に返す。"""

    src = str(text)
    tree = program if program is not None else parse(src)
    numbers = find_numeric_literals(
        src, eval_range, origin=origin, program=tree, skip_markers=skip_markers
    )
    references = find_reference_sites(
        src,
        eval_range,
        first_index=len(numbers),
        origin=origin,
        program=tree,
        outputs=outputs,
        sources=sources,
        skip_markers=skip_markers,
    )
    return [*numbers, *references]


__all__ = [
    "collect_sites",
    "DEFAULT_OUTPUTS",
    "DEFAULT_SKIP_MARKERS",
    "DEFAULT_SOURCES",
    "CallContext",
    "EvalRange",
    "NumericLiteralSite",
    "Position",
    "ReferenceKind",
    "ReferenceSite",
    "Site",
    "SourceBlock",
    "find_numeric_literals",
    "find_reference_sites",
]
