# どこで: `src/pitschpatsch/interactive/toolkit/imgui_toolkit.py`。
# 何を: RetainedToolkit の木を毎フレーム pyimgui で描画する GuiToolkit を提供する。
# なぜ: パネル構築（保持モード）と ImGui の即時モード描画をつなぐため。

from __future__ import annotations

import logging
from typing import Any

from .retained import BindingController, ButtonController, Folder, RetainedToolkit, TextController
from .widgets import render_binding_widget

_logger = logging.getLogger(__name__)


class ImguiToolkit(RetainedToolkit):
    """保持しているフォルダ/コントローラを `render()` で描画する。

    `render()` は ImGui のフレーム内（`begin()`〜`end()` の間）で呼ぶ。
    """

    def render(self) -> bool:
        """木全体を描画する。いずれかのコントローラが操作されたら True。"""

        if not self.is_mounted():
            return False

        import imgui  # type: ignore[import-untyped]

        return self._render_folder(imgui, self._root, depth=0)

    def _render_folder(self, imgui: Any, folder: Folder, *, depth: int) -> bool:
        changed_any = False
        # 描画中のコールバックで木が書き換わることがあるため、スナップショットを走査する。
        for child in list(folder.children):
            if isinstance(child, Folder):
                changed_any |= self._render_child_folder(imgui, child, depth=depth)
                continue
            if getattr(child, "disposed", False):
                continue
            imgui.push_id(str(child.id))
            try:
                changed_any |= self._render_controller(imgui, child)
            finally:
                imgui.pop_id()
        return changed_any

    def _render_child_folder(self, imgui: Any, folder: Folder, *, depth: int) -> bool:
        label = f"{folder.title}##folder{folder.id}"
        flags = imgui.TREE_NODE_DEFAULT_OPEN if folder.expanded else 0
        if depth == 0:
            opened, _visible = imgui.collapsing_header(label, None, flags=flags)
            folder.expanded = bool(opened)
            if not opened:
                return False
            return self._render_folder(imgui, folder, depth=depth + 1)

        opened = imgui.tree_node(label, flags)
        folder.expanded = bool(opened)
        if not opened:
            return False
        try:
            return self._render_folder(imgui, folder, depth=depth + 1)
        finally:
            imgui.tree_pop()

    def _render_controller(self, imgui: Any, controller: Any) -> bool:
        if isinstance(controller, BindingController):
            changed, value = render_binding_widget(controller)
            if changed:
                controller.set_value(value)
            return bool(changed)
        if isinstance(controller, ButtonController):
            if imgui.button(controller.title):
                controller.click()
                return True
            return False
        if isinstance(controller, TextController):
            imgui.text_wrapped(controller.text)
            return False
        _logger.debug("描画方法の無いコントローラ: %r", controller)
        return False


__all__ = ["ImguiToolkit"]
