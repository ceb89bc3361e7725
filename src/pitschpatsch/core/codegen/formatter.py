# どこで: `src/pitschpatsch/core/codegen/formatter.py`。
# 何を: 元テキストの数値/参照サイトだけを差し替えたコードを生成する。数値表示の丸め規則もここに置く。
# なぜ: コメント・空白・改行を 1 バイトも崩さずに、編集した値だけをソースへ戻すため。

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping, Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from pitschpatsch.core.analysis.sites import Site, collect_sites
from pitschpatsch.core.analysis.syntax import Program

_logger = logging.getLogger(__name__)

Replacement = Union[float, int, str]

_BARE_NUMBER_RE = re.compile(r"^-?\d+\.?\d*$")


def _fixed(value: float, places: int) -> str:
    # 2 進小数の正確な値で丸める（半分は 0 から遠い側へ）。
    q = Decimal(1).scaleb(-places)
    text = format(Decimal(value).quantize(q, rounding=ROUND_HALF_UP), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_number(value: float) -> str:
    """数値を表示/ソース用の文字列にする。

    Notes
    -----
    - NaN → `NaN`、±inf → `Infinity` / `-Infinity`
    - |v| < 1 → 小数 3 桁（末尾 0 は落とす）
    - 1 <= |v| < 10 → 小数 2 桁（末尾 0 は落とす）
    - |v| >= 10 → 最も近い整数（ちょうど半分は +∞ 側）
    """

    v = float(value)
    if math.isnan(v):
        return "NaN"
    if math.isinf(v):
        return "Infinity" if v > 0 else "-Infinity"

    a = abs(v)
    if a < 1:
        text = _fixed(v, 3)
    elif a < 10:
        text = _fixed(v, 2)
    else:
        text = str(int(math.floor(v + 0.5)))
    if text == "-0":
        return "0"
    return text


def _replacement_text(value: Replacement) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        raise TypeError(f"bool は置換値にできない: {value!r}")
    return format_number(float(value))


def generate_code(
    program: Program | None,
    text: str | None,
    value_map: Mapping[int, Replacement] | None,
    *,
    sites: Sequence[Site] | None = None,
) -> str:
    """value_map の index にあたるサイトだけを差し替えたテキストを返す。

    Parameters
    ----------
    program : Program | None
        text の AST。None なら text をそのまま返す。
    text : str | None
        元テキスト。
    value_map : Mapping[int, float | str] | None
        サイト index → 新しい値。数値は `format_number` で整形し、文字列はそのまま挿入する。
    sites : Sequence[Site] | None
        置換スパン。None なら program から全サイトを収集する。

    Notes
    -----
    例外は送出しない。失敗時はログを残して元テキストを返す。
    """

    if text is None:
        return ""
    original = str(text)
    if program is None or not original or not value_map:
        return original

    try:
        spans = list(sites) if sites is not None else collect_sites(original, program=program)
        out = original
        for site in sorted(spans, key=lambda s: s.offset, reverse=True):
            if site.index not in value_map:
                continue
            start = int(site.offset)
            end = start + int(site.length)
            if start < 0 or end > len(original):
                raise ValueError(f"site {site.index} が範囲外: [{start}, {end})")
            out = out[:start] + _replacement_text(value_map[site.index]) + out[end:]
    except Exception:
        _logger.exception("コード生成に失敗したため元テキストを使う")
        return original

    if _BARE_NUMBER_RE.match(out.strip()):
        _logger.warning("生成結果が数値だけになったため破棄: %r", out)
        return original
    return out


__all__ = ["Replacement", "format_number", "generate_code"]
