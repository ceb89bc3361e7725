# どこで: `src/pitschpatsch/interactive/toolkit/window_loop.py`。
# 何を: パネルウィンドウを `pyglet.app.run()` の app loop で回す最小ランナーを提供する。
# なぜ: イベント配送と clock（debounce タイマー）を pyglet に任せ、同じループで描画も進めるため。

from __future__ import annotations

from collections.abc import Callable
from typing import Any


def run_window_loop(
    window: Any,
    draw_frame: Callable[[], Any],
    *,
    fps: float = 60.0,
    on_exit: Callable[[], None] | None = None,
) -> None:
    """window が閉じられるまで描画ループを実行する。

    Parameters
    ----------
    window : Any
        pyglet のウィンドウ。
    draw_frame : Callable[[], Any]
        back buffer へ描くだけの関数。`flip()` は pyglet（`Window.draw()`）が行う。
    fps : float
        目標フレームレート。`<=0` ならスロットリングしない。
    on_exit : Callable[[], None] | None
        ループ終了時（例外時も含む）に 1 回呼ぶ後始末。
    """

    import pyglet

    def request_exit(*_: object) -> None:
        pyglet.app.exit()

    window.push_handlers(on_close=request_exit)
    window.push_handlers(on_draw=lambda: draw_frame())

    def draw(dt: float) -> None:
        if window not in pyglet.app.windows:
            return
        window.draw(dt)

    if float(fps) <= 0:
        pyglet.clock.schedule(draw)
    else:
        pyglet.clock.schedule_interval(draw, 1.0 / float(fps))

    try:
        pyglet.app.run(interval=None)
    finally:
        pyglet.clock.unschedule(draw)
        if on_exit is not None:
            on_exit()


__all__ = ["run_window_loop"]
