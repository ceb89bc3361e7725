# どこで: `src/pitschpatsch/core/sync/__init__.py`。
# 何を: Sync Coordinator とタイマー抽象の公開エイリアスをまとめる。
# なぜ: 上位層から最小インポートで使えるようにするため。

from .coordinator import SyncCoordinator
from .state import ErrorReport, SyncState
from .timer import ManualScheduler, Scheduler, TimerHandle

__all__ = [
    "SyncCoordinator",
    "ErrorReport",
    "SyncState",
    "ManualScheduler",
    "Scheduler",
    "TimerHandle",
]
