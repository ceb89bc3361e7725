# どこで: `src/pitschpatsch/interactive/toolkit/retained.py`。
# 何を: フォルダ/コントローラの木をメモリ上に保持する GuiToolkit の共通実装を提供する。
# なぜ: ヘッドレス実装と pyimgui 実装で同じ木構造を共有し、描画だけを差し替えるため。

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Mapping
from typing import Any

_logger = logging.getLogger(__name__)

_ids = itertools.count(1)

BINDING_VIEWS = ("slider", "select", "color", "point")


class Folder:
    """タイトル付きの入れ子フォルダ。children は Folder とコントローラが混在する。"""

    def __init__(self, title: str, *, expanded: bool = True, parent: Folder | None = None) -> None:
        self.id = next(_ids)
        self.title = str(title)
        self.expanded = bool(expanded)
        self.parent = parent
        self.children: list[Any] = []

    def folders(self) -> list[Folder]:
        return [c for c in self.children if isinstance(c, Folder)]

    def controllers(self) -> list[Any]:
        return [c for c in self.children if not isinstance(c, Folder)]

    def find(self, title: str) -> Folder | None:
        """title を持つ最初の子孫フォルダ（深さ優先）を返す。"""

        for child in self.folders():
            if child.title == title:
                return child
            found = child.find(title)
            if found is not None:
                return found
        return None

    def remove(self, child: Any) -> None:
        if child in self.children:
            self.children.remove(child)

    def __repr__(self) -> str:
        return f"Folder({self.title!r}, children={len(self.children)})"


class _Controller:
    def __init__(self, folder: Folder) -> None:
        self.id = next(_ids)
        self.folder = folder
        self.disposed = False
        self.refresh_count = 0
        self._listeners: dict[str, list[Callable[[Any], None]]] = {}

    def on(self, event: str, callback: Callable[[Any], None]) -> _Controller:
        self._listeners.setdefault(str(event), []).append(callback)
        return self

    def _emit(self, event: str, payload: Any) -> None:
        for callback in list(self._listeners.get(event, ())):
            callback(payload)

    def refresh(self) -> None:
        self.refresh_count += 1

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        self._listeners.clear()
        self.folder.remove(self)


class BindingController(_Controller):
    """obj[key] に束縛された値コントロール。

    view は `slider` / `select` / `color` / `point` のいずれか。
    """

    def __init__(
        self, folder: Folder, obj: dict[str, Any], key: str, options: Mapping[str, Any]
    ) -> None:
        super().__init__(folder)
        view = str(options.get("view", "slider"))
        if view not in BINDING_VIEWS:
            raise ValueError(f"未知の view: {view!r}")
        if key not in obj:
            raise KeyError(key)
        self.obj = obj
        self.key = str(key)
        self.options = dict(options)
        self.view = view
        self.label = str(options.get("label", key))

    @property
    def value(self) -> Any:
        return self.obj[self.key]

    def set_value(self, value: Any) -> None:
        """ユーザー操作として値を設定し、change を発火する。"""

        if self.disposed:
            return
        self.obj[self.key] = value
        self._emit("change", value)


class ButtonController(_Controller):
    def __init__(self, folder: Folder, title: str, on_click: Callable[[], None]) -> None:
        super().__init__(folder)
        self.title = str(title)
        self.on("click", lambda _payload: on_click())

    def click(self) -> None:
        if not self.disposed:
            self._emit("click", None)


class TextController(_Controller):
    def __init__(self, folder: Folder, text: str) -> None:
        super().__init__(folder)
        self.text = str(text)


class RetainedToolkit:
    """GuiToolkit プロトコルをメモリ上の木で実装する基底クラス。"""

    def __init__(self, title: str = "Controls") -> None:
        self._root = Folder(title)
        self._mounted = False
        self.mount_count = 0

    def root(self) -> Folder:
        return self._root

    def create_folder(self, parent: Folder, *, title: str, expanded: bool = True) -> Folder:
        folder = Folder(title, expanded=expanded, parent=parent)
        parent.children.append(folder)
        return folder

    def add_binding(
        self, folder: Folder, obj: dict[str, Any], key: str, options: Mapping[str, Any]
    ) -> BindingController:
        controller = BindingController(folder, obj, key, options)
        folder.children.append(controller)
        return controller

    def add_button(self, folder: Folder, title: str, on_click: Callable[[], None]) -> ButtonController:
        controller = ButtonController(folder, title, on_click)
        folder.children.append(controller)
        return controller

    def add_text(self, folder: Folder, text: str) -> TextController:
        controller = TextController(folder, text)
        folder.children.append(controller)
        return controller

    def clear_folder(self, folder: Folder) -> None:
        """folder の子をすべて破棄する（folder 自体は残す）。"""

        for child in list(folder.children):
            if isinstance(child, Folder):
                self.clear_folder(child)
                folder.remove(child)
            else:
                child.dispose()

    def is_mounted(self) -> bool:
        return self._mounted

    def mount(self) -> None:
        self._mounted = True
        self.mount_count += 1
        _logger.debug("panel mounted (count=%d)", self.mount_count)

    def unmount(self) -> None:
        self._mounted = False


__all__ = [
    "BINDING_VIEWS",
    "BindingController",
    "ButtonController",
    "Folder",
    "RetainedToolkit",
    "TextController",
]
