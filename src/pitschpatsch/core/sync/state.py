# どこで: `src/pitschpatsch/core/sync/state.py`。
# 何を: Sync Coordinator の状態と、エラーチャネルへ流す報告の型を定義する。

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal


class SyncState(str, Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    BOUND = "bound"
    EDITING = "editing"
    COMMITTING = "committing"
    ERROR = "error"


# 許可される遷移（遷移元 → 遷移先の集合）。
TRANSITIONS: dict[SyncState, frozenset[SyncState]] = {
    SyncState.IDLE: frozenset({SyncState.ANALYZING}),
    SyncState.ANALYZING: frozenset({SyncState.BOUND, SyncState.ERROR}),
    SyncState.BOUND: frozenset({SyncState.ANALYZING, SyncState.EDITING}),
    SyncState.EDITING: frozenset({SyncState.ANALYZING, SyncState.EDITING, SyncState.COMMITTING}),
    SyncState.COMMITTING: frozenset({SyncState.BOUND, SyncState.ERROR}),
    SyncState.ERROR: frozenset({SyncState.ANALYZING, SyncState.EDITING}),
}

ErrorKind = Literal["parse", "eval", "write-back"]


@dataclass(frozen=True, slots=True)
class ErrorReport:
    """ユーザーに見せるエラー 1 件。"""

    kind: ErrorKind
    message: str
    error: Exception | None = None


__all__ = ["ErrorKind", "ErrorReport", "SyncState", "TRANSITIONS"]
