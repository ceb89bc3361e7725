# どこで: `src/pitschpatsch/interactive/controls/bindings.py`。
# 何を: ParameterGroup（color/point/number）を GuiToolkit のコントロールへ束縛し、変更を site_index 単位で通知する。
# なぜ: コントロールの種類を 1 つの関数で分岐させ、ソーステキストには触れずに値だけを流すため。

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from pitschpatsch.core.codegen.formatter import Replacement, format_number
from pitschpatsch.core.parameters.grouping import ParameterGroup
from pitschpatsch.core.ports import Controller, Folder, GuiToolkit

_logger = logging.getLogger(__name__)

ValueChange = Callable[[int, Replacement], None]
PointMode = Literal["centered", "extended", "normal"]

_COLOR_CHANNELS = ("r", "g", "b")
_POINT_AXES = ("x", "y")


@dataclass(frozen=True, slots=True)
class PointMapping:
    """point コントロールの表示範囲と、値 ↔ 表示値の変換。"""

    mode: PointMode
    minimum: float
    maximum: float
    step: float

    def to_display(self, value: float) -> float:
        if self.mode == "centered":
            return float(value) * 2.0 - 0.5
        return float(value)

    def from_display(self, display: float) -> float:
        if self.mode == "centered":
            return (float(display) + 0.5) / 2.0
        return float(display)


def point_mapping(x_default: Any) -> PointMapping:
    """X 側パラメータの既定値からマッピングを決める。"""

    if isinstance(x_default, (int, float)) and not isinstance(x_default, bool):
        if float(x_default) == 0.5:
            return PointMapping("centered", -0.5, 0.5, 0.01)
        if float(x_default) == 1.0:
            return PointMapping("extended", 0.0, 30.0, 0.1)
    return PointMapping("normal", 0.0, 1.0, 0.01)


def number_range(value: float) -> tuple[float, float, float]:
    """スカラー値の大きさから (min, max, step) を決める。"""

    magnitude = abs(float(value))
    if 0.0 < magnitude < 1.0:
        return 0.0, 1.0, 0.01
    if 1.0 <= magnitude < 10.0:
        return -10.0, 10.0, 0.1
    return -100.0, 100.0, 1.0


@dataclass(eq=False)
class ControlBinding:
    """1 つの ParameterGroup と 1 つのコントローラの結び付き。

    values/originals は site_index → 値（表示値ではなくソース上の値）。
    """

    group: ParameterGroup
    controller: Controller
    obj: dict[str, Any]
    key: str
    originals: dict[int, Replacement]
    values: dict[int, Replacement]
    mapping: PointMapping | None = None
    disposed: bool = field(default=False)

    @property
    def kind(self) -> str:
        return self.group.kind

    @property
    def site_indices(self) -> tuple[int, ...]:
        return self.group.site_indices

    @property
    def display_value(self) -> Any:
        return self.obj[self.key]

    def _sync_display(self) -> None:
        self.obj[self.key] = _display_value(self.group, self.values, self.mapping)

    def set_value(self, index: int, value: Replacement) -> bool:
        """プログラム側から site の値を設定して表示を更新する（change は発火しない）。"""

        if self.disposed or index not in self.values:
            return False
        self.values[index] = value
        self._sync_display()
        self.controller.refresh()
        return True

    def reset(self) -> None:
        """解析時の値へ戻して表示を更新する（change は発火しない）。"""

        if self.disposed:
            return
        self.values.update(self.originals)
        self._sync_display()
        self.controller.refresh()

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        self.controller.dispose()


def _display_value(
    group: ParameterGroup, values: Mapping[int, Replacement], mapping: PointMapping | None
) -> Any:
    if group.kind == "color":
        return {ch: float(values[m.site_index]) for ch, m in zip(_COLOR_CHANNELS, group.members)}
    if group.kind == "point":
        assert mapping is not None
        return {
            axis: mapping.to_display(float(values[m.site_index]))
            for axis, m in zip(_POINT_AXES, group.members)
        }
    return values[group.members[0].site_index]


def _options(group: ParameterGroup, mapping: PointMapping | None) -> dict[str, Any]:
    if group.kind == "color":
        return {"view": "color", "label": group.label, "color": {"type": "float"}}
    if group.kind == "point":
        assert mapping is not None
        axis = {"min": mapping.minimum, "max": mapping.maximum, "step": mapping.step}
        return {
            "view": "point",
            "label": group.label,
            "mode": mapping.mode,
            "x": dict(axis),
            "y": dict(axis),
        }

    member = group.members[0]
    if member.is_select:
        return {"view": "select", "label": group.label, "options": tuple(member.choices)}
    minimum, maximum, step = number_range(float(member.value))
    return {
        "view": "slider",
        "label": group.label,
        "min": minimum,
        "max": maximum,
        "step": step,
        "format": format_number,
    }


def _change_handler(binding: ControlBinding, on_value_change: ValueChange) -> Callable[[Any], None]:
    group = binding.group

    def emit(index: int, value: Replacement) -> None:
        if binding.values.get(index) == value:
            return
        binding.values[index] = value
        on_value_change(index, value)

    def on_change(display: Any) -> None:
        if binding.disposed:
            return
        if group.kind == "color":
            for ch, member in zip(_COLOR_CHANNELS, group.members):
                emit(member.site_index, float(display[ch]))
        elif group.kind == "point":
            mapping = binding.mapping
            assert mapping is not None
            for axis, member in zip(_POINT_AXES, group.members):
                emit(member.site_index, mapping.from_display(float(display[axis])))
        elif group.members[0].is_select:
            emit(group.members[0].site_index, str(display))
        else:
            emit(group.members[0].site_index, float(display))

    return on_change


def create_controls(
    groups: Sequence[ParameterGroup],
    toolkit: GuiToolkit,
    folder: Folder,
    on_value_change: ValueChange,
    *,
    seed: Mapping[int, Replacement] | None = None,
) -> list[ControlBinding]:
    """groups をそれぞれ 1 つのコントロールとして folder に追加する。

    Parameters
    ----------
    groups : Sequence[ParameterGroup]
        表示順に並んだグループ。
    toolkit : GuiToolkit
        コントロールを生成するツールキット。
    folder : Folder
        追加先のフォルダ。
    on_value_change : Callable[[int, Replacement], None]
        値が変わった site ごとに呼ばれる。
    seed : Mapping[int, Replacement] | None
        site_index → 表示に使う現在値。編集途中の値を GUI 再構築後も保つために使う。

    Returns
    -------
    list[ControlBinding]
        groups と同じ順序のバインディング。
    """

    seed = {} if seed is None else seed
    bindings: list[ControlBinding] = []
    for group in groups:
        if group.kind not in ("color", "point", "number"):
            _logger.warning("未知のグループ種別を無視: %s", group.kind)
            continue

        originals = {m.site_index: m.value for m in group.members}
        values = {i: seed.get(i, v) for i, v in originals.items()}
        mapping = point_mapping(group.members[0].default) if group.kind == "point" else None

        key = group.kind if group.kind != "number" else "value"
        obj = {key: _display_value(group, values, mapping)}
        controller = toolkit.add_binding(folder, obj, key, _options(group, mapping))
        binding = ControlBinding(
            group=group,
            controller=controller,
            obj=obj,
            key=key,
            originals=originals,
            values=values,
            mapping=mapping,
        )
        controller.on("change", _change_handler(binding, on_value_change))
        bindings.append(binding)
    return bindings


__all__ = [
    "ControlBinding",
    "PointMapping",
    "create_controls",
    "number_range",
    "point_mapping",
]
