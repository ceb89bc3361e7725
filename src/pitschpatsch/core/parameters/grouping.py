# どこで: `src/pitschpatsch/core/parameters/grouping.py`。
# 何を: ParameterDescriptor 列を color / point / number の ParameterGroup へ分割する純粋関数を提供する。
# なぜ: RGB や XY を 1 つの複合コントロールにまとめるため。分割は決定的で、各 descriptor はちょうど 1 グループに属する。

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from .descriptor import ParameterDescriptor

GroupKind = Literal["color", "point", "number"]

_SPECIAL_POINT_PAIRS: dict[str, tuple[str, str]] = {
    # x 側の名前 → (y 側の名前, pattern/label)
    "xMult": ("yMult", "mult"),
    "speedX": ("speedY", "speed"),
}


@dataclass(frozen=True, slots=True)
class ParameterGroup:
    """1 つの GUI コントロールにまとめられる descriptor 群。

    members は color なら (r, g, b)、point なら (x, y)、number なら 1 要素。
    """

    kind: GroupKind
    members: tuple[ParameterDescriptor, ...]
    label: str
    pattern: str | None = None

    @property
    def site_indices(self) -> tuple[int, ...]:
        return tuple(m.site_index for m in self.members)


def _first_unclaimed(
    descriptors: Sequence[ParameterDescriptor],
    claimed: set[int],
    names: Sequence[str],
    *,
    skip: int | None = None,
) -> int | None:
    for i, d in enumerate(descriptors):
        if i in claimed or i == skip or d.is_select:
            continue
        if d.name in names:
            return i
    return None


def _color_groups(
    descriptors: Sequence[ParameterDescriptor], claimed: set[int]
) -> list[ParameterGroup]:
    groups: list[ParameterGroup] = []
    while True:
        picked = [_first_unclaimed(descriptors, claimed, (c,)) for c in ("r", "g", "b")]
        if any(i is None for i in picked):
            return groups
        members = tuple(descriptors[i] for i in picked if i is not None)
        claimed.update(i for i in picked if i is not None)
        groups.append(ParameterGroup("color", members, "color", "rgb"))


def _point_groups(
    descriptors: Sequence[ParameterDescriptor], claimed: set[int]
) -> list[ParameterGroup]:
    groups: list[ParameterGroup] = []
    for i, d in enumerate(descriptors):
        if i in claimed or d.is_select:
            continue

        name = d.name
        special = _SPECIAL_POINT_PAIRS.get(name)
        if special is not None:
            y_name, pattern = special
            j = _first_unclaimed(descriptors, claimed, (y_name,), skip=i)
            label = pattern
        elif name.endswith(("X", "x")):
            base = name[:-1]
            j = _first_unclaimed(descriptors, claimed, (base + "Y", base + "y"), skip=i)
            pattern = "xy"
            # 裸の x / y は基底名が空なので "point" と表示する（空ラベルは不可）。
            label = base.lower() or "point"
        else:
            continue

        if j is None:
            continue
        claimed.update((i, j))
        groups.append(ParameterGroup("point", (d, descriptors[j]), label, pattern))
    return groups


def detect_groups(descriptors: Sequence[ParameterDescriptor]) -> list[ParameterGroup]:
    """descriptors を color → point → number の順に分割して返す。

    走査は配列順（= サイトのオフセット順）なので、同じ入力には同じ結果を返す。
    """

    items = list(descriptors)
    claimed: set[int] = set()
    groups = _color_groups(items, claimed)
    groups.extend(_point_groups(items, claimed))
    for i, d in enumerate(items):
        if i in claimed:
            continue
        groups.append(ParameterGroup("number", (d,), d.name))
    return groups


__all__ = ["GroupKind", "ParameterGroup", "detect_groups"]
