# どこで: `src/pitschpatsch/interactive/toolkit/clock.py`。
# 何を: pyglet.clock を使った取り消し可能タイマー（Scheduler 実装）を提供する。
# なぜ: pyglet の app loop 上で書き戻しの debounce を動かすため。

from __future__ import annotations

from collections.abc import Callable


class _PygletTimer:
    def __init__(self, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._cancelled = False
        self.fired = False

    def __call__(self, dt: float) -> None:
        # pyglet は経過秒を渡してくるが、コールバックは引数無しで呼ぶ。
        if self._cancelled:
            return
        self.fired = True
        self._callback()

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True

        import pyglet

        pyglet.clock.unschedule(self)

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class PygletScheduler:
    """`pyglet.clock.schedule_once` で call_later を実現する Scheduler。"""

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> _PygletTimer:
        delay = float(delay_s)
        if delay < 0:
            raise ValueError(f"delay_s は 0 以上である必要がある: got={delay_s}")

        import pyglet

        timer = _PygletTimer(callback)
        pyglet.clock.schedule_once(timer, delay)
        return timer


__all__ = ["PygletScheduler"]
