# どこで: `src/pitschpatsch/interactive/toolkit/__init__.py`。
# 何を: GuiToolkit 実装（ヘッドレス/pyimgui）と pyglet 周りの公開エイリアスをまとめる。
# なぜ: pyimgui/pyglet は各関数内で遅延 import するため、ここでの import はヘッドレス環境でも安全。

from __future__ import annotations

from .clock import PygletScheduler
from .headless import HeadlessToolkit, iter_controllers
from .imgui_toolkit import ImguiToolkit
from .pyglet_backend import PanelWindow, create_panel_window
from .retained import BindingController, ButtonController, Folder, RetainedToolkit, TextController
from .window_loop import run_window_loop

__all__ = [
    "PygletScheduler",
    "HeadlessToolkit",
    "iter_controllers",
    "ImguiToolkit",
    "PanelWindow",
    "create_panel_window",
    "BindingController",
    "ButtonController",
    "Folder",
    "RetainedToolkit",
    "TextController",
    "run_window_loop",
]
