# どこで: `src/pitschpatsch/interactive/toolkit/headless.py`。
# 何を: 描画を持たない GuiToolkit 実装と、木を探索するための補助関数を提供する。
# なぜ: ウィンドウ無しでパネルの構築/操作をテストしたり、ヘッドレスで同期エンジンを動かすため。

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from .retained import BindingController, ButtonController, Folder, RetainedToolkit, TextController


def iter_controllers(folder: Folder) -> Iterator[Any]:
    """folder 以下のコントローラを表示順（深さ優先）に列挙する。"""

    for child in folder.children:
        if isinstance(child, Folder):
            yield from iter_controllers(child)
        else:
            yield child


class HeadlessToolkit(RetainedToolkit):
    """メモリ上にだけパネルを構築する GuiToolkit。"""

    def bindings(self, folder: Folder | None = None) -> list[BindingController]:
        start = self._root if folder is None else folder
        return [c for c in iter_controllers(start) if isinstance(c, BindingController)]

    def binding(self, label: str, folder: Folder | None = None) -> BindingController:
        for controller in self.bindings(folder):
            if controller.label == label:
                return controller
        raise KeyError(label)

    def buttons(self, folder: Folder | None = None) -> list[ButtonController]:
        start = self._root if folder is None else folder
        return [c for c in iter_controllers(start) if isinstance(c, ButtonController)]

    def button(self, title: str, folder: Folder | None = None) -> ButtonController:
        for controller in self.buttons(folder):
            if controller.title == title:
                return controller
        raise KeyError(title)

    def texts(self, folder: Folder | None = None) -> list[str]:
        start = self._root if folder is None else folder
        return [c.text for c in iter_controllers(start) if isinstance(c, TextController)]

    def folder(self, title: str) -> Folder:
        found = self._root.find(title)
        if found is None:
            raise KeyError(title)
        return found


__all__ = ["HeadlessToolkit", "iter_controllers"]
