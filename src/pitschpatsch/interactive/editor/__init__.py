# どこで: `src/pitschpatsch/interactive/editor/__init__.py`。
# 何を: ホストエディタ/実行サンドボックス実装の公開 API を集約する。

from __future__ import annotations

from .buffer import FileBuffer, TextBuffer
from .sandbox import CallbackSandbox, SidecarFileSandbox

__all__ = ["FileBuffer", "TextBuffer", "CallbackSandbox", "SidecarFileSandbox"]
