# どこで: `src/pitschpatsch/interactive/editor/sandbox.py`。
# 何を: ExecutionSandbox の実装（任意の関数へ渡す / 隣接ファイルへ書き出す）を提供する。
# なぜ: 生成した評価用コードを、ブラウザ側のライブ環境など外部の実行系へ受け渡すため。

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path

_logger = logging.getLogger(__name__)


class CallbackSandbox:
    """evaluate(code) を任意の関数へ委譲する。"""

    def __init__(self, fn: Callable[[str], object]) -> None:
        self._fn = fn

    def evaluate(self, code: str) -> None:
        self._fn(str(code))


class SidecarFileSandbox:
    """評価用コードをファイルへ書き出す（置き換えは rename で行う）。

    監視側は常に完全なファイルだけを読む。
    """

    def __init__(self, path: str | Path, *, encoding: str = "utf-8") -> None:
        self.path = Path(path)
        self._encoding = str(encoding)
        self.count = 0

    @classmethod
    def beside(cls, source_path: str | Path) -> SidecarFileSandbox:
        """`sketch.js` に対して `sketch.live.js` へ書き出す Sandbox を返す。"""

        source = Path(source_path)
        return cls(source.with_name(f"{source.stem}.live{source.suffix or '.js'}"))

    def evaluate(self, code: str) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(str(code), encoding=self._encoding)
        os.replace(tmp, self.path)
        self.count += 1
        _logger.debug("eval code written: %s (%d)", self.path, self.count)


__all__ = ["CallbackSandbox", "SidecarFileSandbox"]
