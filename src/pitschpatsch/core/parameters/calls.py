# どこで: `src/pitschpatsch/core/parameters/calls.py`。
# 何を: descriptor を呼び出し（function_id）単位のフォルダへまとめ、表示名を決める。
# なぜ: GUI で `osc`, `osc 2`, ... のように呼び出しごとの折りたたみ見出しを出すため。

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .descriptor import ParameterDescriptor
from .grouping import ParameterGroup, detect_groups


@dataclass(frozen=True, slots=True)
class CallFolder:
    """1 つの関数呼び出しに属する descriptor 群と、その見出し。"""

    function_id: str
    function_name: str
    display_name: str
    line: int
    column: int
    descriptors: tuple[ParameterDescriptor, ...]
    groups: tuple[ParameterGroup, ...]


def group_by_call(
    descriptors: Sequence[ParameterDescriptor],
) -> dict[str, list[ParameterDescriptor]]:
    """function_id ごとに descriptor を集める（初出順、各リストは入力順）。"""

    out: dict[str, list[ParameterDescriptor]] = {}
    for d in descriptors:
        out.setdefault(d.function_id, []).append(d)
    return out


def ordered_call_groups(descriptors: Sequence[ParameterDescriptor]) -> list[CallFolder]:
    """呼び出しフォルダを (line, column) 順に並べて返す。

    同じ関数名の 2 つ目以降は `name 2`, `name 3`, ... と表示する。
    """

    by_call = group_by_call(descriptors)
    ordered = sorted(
        by_call.items(),
        key=lambda item: (item[1][0].function_line, item[1][0].function_column),
    )

    counts: dict[str, int] = {}
    folders: list[CallFolder] = []
    for function_id, members in ordered:
        head = members[0]
        n = counts.get(head.function_name, 0) + 1
        counts[head.function_name] = n
        display = head.function_name if n == 1 else f"{head.function_name} {n}"
        folders.append(
            CallFolder(
                function_id=function_id,
                function_name=head.function_name,
                display_name=display,
                line=head.function_line,
                column=head.function_column,
                descriptors=tuple(members),
                groups=tuple(detect_groups(members)),
            )
        )
    return folders


__all__ = ["CallFolder", "group_by_call", "ordered_call_groups"]
