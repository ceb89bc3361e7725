# どこで: `src/pitschpatsch/interactive/toolkit/pyglet_backend.py`。
# 何を: パネル用 pyglet ウィンドウの生成と、ImGui コンテキスト/renderer を抱えて 1 フレーム描画する PanelWindow を提供する。
# なぜ: backend 固有のライフサイクル（context/renderer/GL）を 1 箇所に閉じ込め、ImguiToolkit を描画 API だけに保つため。

from __future__ import annotations

import time
from typing import Any

from .imgui_toolkit import ImguiToolkit

DEFAULT_WINDOW_WIDTH = 420
DEFAULT_WINDOW_HEIGHT = 720


def _create_imgui_pyglet_renderer(imgui_pyglet_mod: Any, panel_window: Any) -> Any:
    """pyglet 用の ImGui renderer を作成する。"""

    factory = getattr(imgui_pyglet_mod, "create_renderer", None)
    if callable(factory):
        return factory(panel_window)
    renderer_type = getattr(imgui_pyglet_mod, "PygletRenderer", None)
    if renderer_type is None:
        raise RuntimeError("imgui.integrations.pyglet renderer is unavailable")
    return renderer_type(panel_window)


def _sync_imgui_io_for_window(imgui_mod: Any, panel_window: Any, *, dt: float) -> None:
    """ImGui IO をウィンドウのサイズ/スケール/Δt に合わせる。"""

    io = imgui_mod.get_io()
    io.delta_time = max(float(dt), 1e-4)

    fb_w, fb_h = panel_window.get_framebuffer_size()
    win_w, win_h = panel_window.width, panel_window.height
    io.display_size = (float(win_w), float(win_h))
    io.display_fb_scale = (
        float(fb_w) / float(max(1, win_w)),
        float(fb_h) / float(max(1, win_h)),
    )


def create_panel_window(
    *,
    width: int = DEFAULT_WINDOW_WIDTH,
    height: int = DEFAULT_WINDOW_HEIGHT,
    caption: str = "Hydra Controls",
    vsync: bool = False,
) -> Any:
    """パネル用の pyglet ウィンドウを生成する。"""

    import pyglet

    gl_cfg = pyglet.gl.Config(  # type: ignore[abstract]
        double_buffer=True,
        sample_buffers=1,
        samples=4,
    )
    return pyglet.window.Window(  # type: ignore[abstract]
        width=int(width),
        height=int(height),
        caption=str(caption),
        resizable=True,
        vsync=bool(vsync),
        config=gl_cfg,
    )


class PanelWindow:
    """ImguiToolkit を 1 枚の pyglet ウィンドウに全面表示する。

    `draw_frame()` は back buffer へ描くだけで、`flip()` は呼ばない。
    """

    def __init__(self, panel_window: Any, toolkit: ImguiToolkit, *, title: str = "Hydra Controls") -> None:
        import imgui  # type: ignore[import-untyped]

        try:
            from imgui.integrations import (
                pyglet as imgui_pyglet,  # type: ignore[import-untyped]
            )
        except Exception as exc:
            raise RuntimeError(f"imgui.integrations.pyglet を import できない: {exc}") from exc

        self.window = panel_window
        self._toolkit = toolkit
        self._title = str(title)

        self._imgui = imgui
        self._context = imgui.create_context()
        imgui.style_colors_dark()
        imgui.set_current_context(self._context)

        self._renderer = _create_imgui_pyglet_renderer(imgui_pyglet, panel_window)
        self._prev_time = time.monotonic()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def draw_frame(self) -> bool:
        """1 フレーム分のパネルを描画する。コントローラが操作されたら True。"""

        if self._closed:
            return False

        now = time.monotonic()
        dt = now - self._prev_time
        self._prev_time = now

        imgui = self._imgui
        imgui.set_current_context(self._context)

        imgui.new_frame()
        _sync_imgui_io_for_window(imgui, self.window, dt=dt)

        imgui.set_next_window_position(0, 0)
        imgui.set_next_window_size(self.window.width, self.window.height)
        imgui.begin(
            self._title,
            flags=imgui.WINDOW_NO_RESIZE | imgui.WINDOW_NO_COLLAPSE | imgui.WINDOW_NO_MOVE,
        )
        try:
            changed = self._toolkit.render()
        finally:
            imgui.end()

        imgui.render()

        import pyglet

        pyglet.gl.glClearColor(0.12, 0.12, 0.12, 1.0)
        self.window.clear()
        self._renderer.render(imgui.get_draw_data())
        return changed

    def close(self) -> None:
        """renderer/context/ウィンドウを破棄する。二重 close は無視する。"""

        if self._closed:
            return
        self._closed = True

        shutdown = getattr(self._renderer, "shutdown", None)
        if callable(shutdown):
            shutdown()
        self._imgui.destroy_context(self._context)
        self._toolkit.unmount()
        self.window.close()


__all__ = ["PanelWindow", "create_panel_window"]
