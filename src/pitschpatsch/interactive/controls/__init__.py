# どこで: `src/pitschpatsch/interactive/controls/__init__.py`。
# 何を: コントロール束縛層の公開 API を集約する。

from __future__ import annotations

from .bindings import ControlBinding, PointMapping, create_controls, number_range, point_mapping

__all__ = [
    "ControlBinding",
    "PointMapping",
    "create_controls",
    "number_range",
    "point_mapping",
]
