# どこで: `src/pitschpatsch/interactive/toolkit/widgets.py`。
# 何を: BindingController の view ごとに pyimgui ウィジェットを描画し、(changed, value) を返す関数群を提供する。
# なぜ: ImguiToolkit の木の走査と、ウィジェット固有の値変換を分離するため。

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .retained import BindingController

WidgetFn = Callable[[BindingController], tuple[bool, Any]]


def _display_format(controller: BindingController, value: float) -> str:
    """slider の表示文字列（printf 形式）を返す。"""

    fmt = controller.options.get("format")
    if callable(fmt):
        # ImGui は printf として解釈するため、そのまま出す文字列は % をエスケープする。
        return str(fmt(value)).replace("%", "%%")
    if fmt is not None:
        return str(fmt)
    return "%.3f"


def widget_slider(controller: BindingController) -> tuple[bool, float]:
    """view=slider の float スライダーを描画する。"""

    import imgui  # type: ignore[import-untyped]

    value = float(controller.value)
    min_value = float(controller.options.get("min", 0.0))
    max_value = float(controller.options.get("max", 1.0))
    changed, out = imgui.slider_float(
        f"{controller.label}##{controller.id}",
        value,
        min_value,
        max_value,
        format=_display_format(controller, value),
    )
    if not changed:
        return False, value
    step = controller.options.get("step")
    if step:
        out = round(float(out) / float(step)) * float(step)
    return True, float(out)


def widget_select(controller: BindingController) -> tuple[bool, str]:
    """view=select のコンボボックスを描画する。"""

    import imgui  # type: ignore[import-untyped]

    choices = [str(x) for x in controller.options.get("options", ())]
    current = str(controller.value)
    if not choices:
        imgui.text(f"{controller.label}: {current}")
        return False, current
    try:
        selected = choices.index(current)
    except ValueError:
        choices.insert(0, current)
        selected = 0

    clicked, index = imgui.combo(f"{controller.label}##{controller.id}", selected, choices)
    if not clicked or int(index) == selected:
        return False, current
    return True, choices[int(index)]


def widget_color(controller: BindingController) -> tuple[bool, dict[str, float]]:
    """view=color の RGB カラーピッカーを描画する（各成分は float）。"""

    import imgui  # type: ignore[import-untyped]

    rgb = dict(controller.value)
    changed, out = imgui.color_edit3(
        f"{controller.label}##{controller.id}",
        float(rgb["r"]),
        float(rgb["g"]),
        float(rgb["b"]),
        flags=imgui.COLOR_EDIT_FLOAT | imgui.COLOR_EDIT_DISPLAY_RGB,
    )
    if not changed:
        return False, rgb
    r, g, b = out
    return True, {"r": float(r), "g": float(g), "b": float(b)}


def widget_point(controller: BindingController) -> tuple[bool, dict[str, float]]:
    """view=point の 2 成分スライダーを描画する。"""

    import imgui  # type: ignore[import-untyped]

    point = dict(controller.value)
    x_opts = controller.options.get("x", {})
    y_opts = controller.options.get("y", x_opts)
    min_value = min(float(x_opts.get("min", 0.0)), float(y_opts.get("min", 0.0)))
    max_value = max(float(x_opts.get("max", 1.0)), float(y_opts.get("max", 1.0)))
    changed, out = imgui.slider_float2(
        f"{controller.label}##{controller.id}",
        float(point["x"]),
        float(point["y"]),
        min_value,
        max_value,
        format="%.2f",
    )
    if not changed:
        return False, point
    x, y = out
    return True, {"x": float(x), "y": float(y)}


_VIEW_TO_WIDGET: dict[str, WidgetFn] = {
    "slider": widget_slider,
    "select": widget_select,
    "color": widget_color,
    "point": widget_point,
}


def render_binding_widget(controller: BindingController) -> tuple[bool, Any]:
    """controller.view に応じたウィジェットを描画し、(changed, value) を返す。

    Raises
    ------
    ValueError
        未知 view の場合。
    """

    fn = _VIEW_TO_WIDGET.get(controller.view)
    if fn is None:
        raise ValueError(f"unknown view: {controller.view}")
    return fn(controller)


__all__ = ["render_binding_widget"]
