# どこで: `src/pitschpatsch/interactive/panel/__init__.py`。
# 何を: コントロールパネル管理の公開 API を集約する。

from __future__ import annotations

from .manager import EMPTY_TEXT, NO_ERRORS_TEXT, RESET_ALL_TITLE, WAITING_TEXT, PanelManager

__all__ = ["PanelManager", "EMPTY_TEXT", "NO_ERRORS_TEXT", "RESET_ALL_TITLE", "WAITING_TEXT"]
