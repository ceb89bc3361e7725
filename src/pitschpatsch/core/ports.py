# どこで: `src/pitschpatsch/core/ports.py`。
# 何を: ホストエディタ/実行サンドボックス/GUI ツールキットとの最小インターフェース（Protocol）を定義する。
# なぜ: core を特定のエディタや GUI 実装に依存させず、ヘッドレス実装で差し替えてテストできるようにするため。

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from pitschpatsch.core.analysis.sites import EvalRange, Position


@dataclass(frozen=True, slots=True)
class EditorChange:
    """エディタで [start, end) が text に置き換わったことを表す（座標は変更前）。"""

    start: Position
    end: Position
    text: str

    def map_position(self, pos: Position) -> Position:
        """変更より後ろ（end 以降）の位置を、変更後の座標へ写す。"""

        inserted = self.text.split("\n")
        if pos.line == self.end.line:
            if len(inserted) == 1:
                ch = self.start.ch + len(inserted[0]) + (pos.ch - self.end.ch)
            else:
                ch = len(inserted[-1]) + (pos.ch - self.end.ch)
            return Position(self.start.line + len(inserted) - 1, ch)
        line_delta = (len(inserted) - 1) - (self.end.line - self.start.line)
        return Position(pos.line + line_delta, pos.ch)

    @property
    def inserted_end(self) -> Position:
        """挿入テキスト末尾の（変更後の）位置。"""

        return self.map_position(self.end)


class HostEditor(Protocol):
    def get_text(self, eval_range: EvalRange | None = None) -> str: ...

    def replace_range(self, text: str, start: Position, end: Position) -> None: ...

    def get_cursor(self) -> Position: ...

    def on_change(self, callback: Callable[[EditorChange], None]) -> None: ...

    def on_evaluate(self, callback: Callable[[EvalRange], None]) -> None: ...


class ExecutionSandbox(Protocol):
    def evaluate(self, code: str) -> None:
        """code を実行する（戻り値なし。失敗は例外またはエラーチャネルで知らせる）。"""
        ...


class Controller(Protocol):
    def on(self, event: str, callback: Callable[[Any], None]) -> Controller: ...

    def refresh(self) -> None: ...

    def dispose(self) -> None: ...


Folder = Any


class GuiToolkit(Protocol):
    def root(self) -> Folder: ...

    def create_folder(self, parent: Folder, *, title: str, expanded: bool = True) -> Folder: ...

    def add_binding(
        self, folder: Folder, obj: dict[str, Any], key: str, options: Mapping[str, Any]
    ) -> Controller: ...

    def add_button(self, folder: Folder, title: str, on_click: Callable[[], None]) -> Controller: ...

    def add_text(self, folder: Folder, text: str) -> Controller: ...

    def clear_folder(self, folder: Folder) -> None: ...

    def is_mounted(self) -> bool: ...

    def mount(self) -> None: ...


__all__ = [
    "Controller",
    "EditorChange",
    "ExecutionSandbox",
    "Folder",
    "GuiToolkit",
    "HostEditor",
]
