"""
どこで: `src/pitschpatsch/api/runner.py`。公開 API のランナー実装。
何を: スケッチファイルを読み込み、pyimgui のコントロールパネルを pyglet ウィンドウで表示するランナーを提供する。
なぜ: ファイルを直接ライブ編集しながら、数値をスライダー等で調整できる経路を用意するため。
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import pyglet

from pitschpatsch.core.runtime_config import configure_logging, runtime_config, set_config_path
from pitschpatsch.interactive.editor.buffer import FileBuffer
from pitschpatsch.interactive.editor.sandbox import CallbackSandbox, SidecarFileSandbox
from pitschpatsch.interactive.toolkit.clock import PygletScheduler
from pitschpatsch.interactive.toolkit.imgui_toolkit import ImguiToolkit
from pitschpatsch.interactive.toolkit.pyglet_backend import PanelWindow, create_panel_window
from pitschpatsch.interactive.toolkit.window_loop import run_window_loop

from .session import create_session

_logger = logging.getLogger(__name__)

_RELOAD_INTERVAL_S = 0.5


def run(
    path: str | Path,
    *,
    evaluate: Callable[[str], object] | None = None,
    config_path: str | Path | None = None,
    fps: float = 60.0,
) -> None:
    """スケッチファイルのコントロールパネルを開き、ウィンドウが閉じられるまで実行する。

    Parameters
    ----------
    path : str | Path
        ライブ編集するスケッチファイル。書き戻しはこのファイルへ保存される。
    evaluate : Callable[[str], object] | None
        評価用コードを受け取る関数。None の場合は `<stem>.live<suffix>` へ書き出す。
    config_path : str | Path | None
        設定ファイル（config.yaml）のパス。指定した場合は探索より優先する。
    fps : float
        パネルの目標フレームレート。

    Notes
    -----
    ファイルが外部エディタで保存された場合は読み直し、全体を評価し直す。
    """

    set_config_path(config_path)
    cfg = runtime_config()
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    configure_logging(cfg.logging)

    pyglet.options["vsync"] = False

    editor = FileBuffer(path)
    sandbox = CallbackSandbox(evaluate) if evaluate is not None else SidecarFileSandbox.beside(path)

    toolkit = ImguiToolkit(cfg.parameter_gui_title)
    width, height = cfg.parameter_gui_window_size
    window = create_panel_window(width=width, height=height, caption=cfg.parameter_gui_title)
    panel_window = PanelWindow(window, toolkit, title=cfg.parameter_gui_title)

    session = create_session(
        editor,
        sandbox,
        toolkit=toolkit,
        scheduler=PygletScheduler(),
        analysis_config=cfg.analysis,
        sync_config=cfg.sync,
    )
    editor.evaluate_all()

    def reload(dt: float) -> None:
        if editor.reload():
            editor.evaluate_all()

    pyglet.clock.schedule_interval(reload, _RELOAD_INTERVAL_S)

    def close() -> None:
        pyglet.clock.unschedule(reload)
        # 保留中の書き戻しは終了前に反映する。
        session.coordinator.flush()
        panel_window.close()

    _logger.info("live controls for %s", editor.path)
    run_window_loop(window, panel_window.draw_frame, fps=fps, on_exit=close)


__all__ = ["run"]
