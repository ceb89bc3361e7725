# どこで: `src/pitschpatsch/core/sync/timer.py`。
# 何を: 取り消し可能なタイマーの抽象（Scheduler/TimerHandle）と、手動で時間を進める実装を提供する。
# なぜ: debounce の取り消し/順序をイベントループ無しで決定的にテストできるようにするため。

from __future__ import annotations

import heapq
import itertools
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...

    @property
    def cancelled(self) -> bool: ...


class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle: ...


class _ManualTimer:
    __slots__ = ("due", "seq", "callback", "_cancelled", "fired")

    def __init__(self, due: float, seq: int, callback: Callable[[], None]) -> None:
        self.due = due
        self.seq = seq
        self.callback = callback
        self._cancelled = False
        self.fired = False

    def __lt__(self, other: _ManualTimer) -> bool:
        return (self.due, self.seq) < (other.due, other.seq)

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler:
    """`advance()` で仮想時刻を進めたときだけタイマーを発火させる Scheduler。"""

    def __init__(self) -> None:
        self._now = 0.0
        self._heap: list[_ManualTimer] = []
        self._seq = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> _ManualTimer:
        delay = float(delay_s)
        if delay < 0:
            raise ValueError(f"delay_s は 0 以上である必要がある: got={delay_s}")
        timer = _ManualTimer(self._now + delay, next(self._seq), callback)
        heapq.heappush(self._heap, timer)
        return timer

    def pending(self) -> int:
        """未発火かつ未取り消しのタイマー数を返す。"""

        return sum(1 for t in self._heap if not t.cancelled)

    def advance(self, seconds: float) -> int:
        """仮想時刻を seconds 進め、期限が来たタイマーを順に発火する。発火数を返す。"""

        target = self._now + float(seconds)
        fired = 0
        while self._heap and self._heap[0].due <= target:
            timer = heapq.heappop(self._heap)
            if timer.cancelled:
                continue
            # コールバック内で新しく予約されたタイマーも同じ advance で扱う。
            self._now = max(self._now, timer.due)
            timer.fired = True
            timer.callback()
            fired += 1
        self._now = target
        return fired


__all__ = ["ManualScheduler", "Scheduler", "TimerHandle"]
