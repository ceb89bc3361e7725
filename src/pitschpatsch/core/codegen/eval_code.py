# どこで: `src/pitschpatsch/core/codegen/eval_code.py`。
# 何を: 実行サンドボックスへ送る評価用コード（static / arrow の 2 形式）を組み立てる。
# なぜ: arrow 形式なら値をグローバル変数経由で渡せるため、GUI 操作のたびにシェーダ構造を作り直さずに済む。

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Literal

from pitschpatsch.core.analysis.sites import Site
from pitschpatsch.core.analysis.syntax import Program
from pitschpatsch.core.parameters.descriptor import ParameterDescriptor

from .formatter import Replacement, format_number, generate_code

EvalMode = Literal["static", "arrow"]
EVAL_MODES: tuple[str, ...] = ("static", "arrow")


def static_code(
    program: Program | None,
    text: str,
    values: Mapping[int, Replacement],
    *,
    sites: Sequence[Site] | None = None,
) -> str:
    """編集済みの値をすべてリテラルとして埋め込んだコードを返す。"""

    return generate_code(program, text, values, sites=sites)


def arrow_code(
    program: Program | None,
    text: str,
    values: Mapping[int, Replacement],
    *,
    sites: Sequence[Site] | None = None,
    descriptors: Sequence[ParameterDescriptor] = (),
) -> str:
    """編集済みの数値を `() => key` に置き換え、先頭で `key = value;` を代入するコードを返す。

    文字列の値（参照名や式）はそのまま埋め込む。
    """

    keys = {d.site_index: d.key for d in descriptors}
    replacements: dict[int, Replacement] = {}
    assignments: list[str] = []
    for index in sorted(values):
        value = values[index]
        key = keys.get(index)
        if isinstance(value, str) or key is None:
            replacements[index] = value
            continue
        assignments.append(f"{key} = {format_number(float(value))};")
        replacements[index] = f"() => {key}"

    body = generate_code(program, text, replacements, sites=sites)
    if not assignments:
        return body
    return "\n".join(assignments) + "\n" + body


__all__ = ["EVAL_MODES", "EvalMode", "arrow_code", "static_code"]
