# どこで: `src/pitschpatsch/interactive/editor/buffer.py`。
# 何を: HostEditor プロトコルを満たすメモリ上のテキストバッファと、ファイルへ保存するバッファを提供する。
# なぜ: 外部エディタ無しで同期エンジンを動かし、スケッチファイルを直接ライブ編集できるようにするため。

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from pitschpatsch.core.analysis.sites import EvalRange, Position
from pitschpatsch.core.ports import EditorChange

_logger = logging.getLogger(__name__)


class TextBuffer:
    """行/列で位置を扱うテキストバッファ。

    `replace_range()` は誰が呼んでも変更通知を出す（書き戻し由来かどうかの判定は購読側が行う）。
    """

    def __init__(self, text: str = "") -> None:
        self._text = str(text)
        self._cursor = Position(0, 0)
        self._change_listeners: list[Callable[[EditorChange], None]] = []
        self._evaluate_listeners: list[Callable[[EvalRange], None]] = []

    # --- 座標 ---
    @property
    def text(self) -> str:
        return self._text

    def lines(self) -> list[str]:
        return self._text.split("\n")

    def offset_of(self, pos: Position) -> int:
        """位置を文字オフセットへ変換する（範囲外は末尾へ丸める）。"""

        lines = self.lines()
        if pos.line < 0:
            return 0
        if pos.line >= len(lines):
            return len(self._text)
        offset = sum(len(line) + 1 for line in lines[: pos.line])
        return offset + max(0, min(pos.ch, len(lines[pos.line])))

    def position_at(self, offset: int) -> Position:
        """文字オフセットを位置へ変換する（範囲外は両端へ丸める）。"""

        offset = max(0, min(int(offset), len(self._text)))
        head = self._text[:offset]
        line = head.count("\n")
        return Position(line, offset - (head.rfind("\n") + 1))

    def end_position(self) -> Position:
        lines = self.lines()
        return Position(len(lines) - 1, len(lines[-1]))

    # --- HostEditor ---
    def get_text(self, eval_range: EvalRange | None = None) -> str:
        if eval_range is None:
            return self._text
        start = self.offset_of(eval_range.start)
        end = self.offset_of(eval_range.end)
        return self._text[start:end]

    def replace_range(self, text: str, start: Position, end: Position) -> None:
        if end < start:
            raise ValueError(f"end は start 以降である必要がある: start={start}, end={end}")
        a = self.offset_of(start)
        b = self.offset_of(end)
        self._text = self._text[:a] + str(text) + self._text[b:]
        change = EditorChange(start, end, str(text))
        self._cursor = min(self._cursor, self.end_position())
        for listener in list(self._change_listeners):
            listener(change)

    def get_cursor(self) -> Position:
        return self._cursor

    def set_cursor(self, pos: Position) -> None:
        self._cursor = pos

    def on_change(self, callback: Callable[[EditorChange], None]) -> None:
        self._change_listeners.append(callback)

    def on_evaluate(self, callback: Callable[[EvalRange], None]) -> None:
        self._evaluate_listeners.append(callback)

    # --- 編集/評価コマンド ---
    def insert(self, pos: Position, text: str) -> None:
        self.replace_range(text, pos, pos)

    def set_text(self, text: str) -> None:
        """全文を置き換える（変更通知あり）。"""

        self.replace_range(text, Position(0, 0), self.end_position())

    def evaluate(self, eval_range: EvalRange) -> EvalRange:
        for listener in list(self._evaluate_listeners):
            listener(eval_range)
        return eval_range

    def evaluate_all(self) -> EvalRange:
        return self.evaluate(EvalRange(Position(0, 0), self.end_position()))

    def evaluate_line(self, line: int | None = None) -> EvalRange:
        """カーソル行（または line）を評価する。"""

        lines = self.lines()
        n = self._cursor.line if line is None else int(line)
        n = max(0, min(n, len(lines) - 1))
        return self.evaluate(EvalRange(Position(n, 0), Position(n, len(lines[n]))))

    def evaluate_block(self, line: int | None = None) -> EvalRange:
        """カーソル行を含む、空行で区切られたブロックを評価する。"""

        lines = self.lines()
        n = self._cursor.line if line is None else int(line)
        n = max(0, min(n, len(lines) - 1))
        first = n
        while first > 0 and lines[first - 1].strip():
            first -= 1
        last = n
        while last < len(lines) - 1 and lines[last + 1].strip():
            last += 1
        return self.evaluate(EvalRange(Position(first, 0), Position(last, len(lines[last]))))


class FileBuffer(TextBuffer):
    """ファイルの内容を保持し、変更のたびに保存するバッファ。"""

    def __init__(self, path: str | Path, *, encoding: str = "utf-8") -> None:
        self.path = Path(path)
        self._encoding = str(encoding)
        super().__init__(self.path.read_text(encoding=self._encoding))
        self._mtime_ns = self._stat_mtime()

    def _stat_mtime(self) -> int | None:
        try:
            return self.path.stat().st_mtime_ns
        except OSError:
            return None

    def save(self) -> None:
        self.path.write_text(self._text, encoding=self._encoding)
        self._mtime_ns = self._stat_mtime()
        _logger.debug("saved: %s", self.path)

    def replace_range(self, text: str, start: Position, end: Position) -> None:
        super().replace_range(text, start, end)
        self.save()

    def reload(self) -> bool:
        """ファイルが外部で更新されていれば読み直す。内容が変わった場合 True。"""

        mtime = self._stat_mtime()
        if mtime is None or mtime == self._mtime_ns:
            return False
        self._mtime_ns = mtime
        text = self.path.read_text(encoding=self._encoding)
        if text == self._text:
            return False
        _logger.info("reloaded: %s", self.path)
        a, b, inserted = _changed_span(self._text, text)
        # 自分の保存として扱わないよう、保存を伴わない基底の置換で通知する。
        TextBuffer.replace_range(self, inserted, self.position_at(a), self.position_at(b))
        return True


def _changed_span(old: str, new: str) -> tuple[int, int, str]:
    """共通の先頭・末尾を除いた差分を返す（old 側の [a, b) を挿入テキストで置き換える）。"""

    limit = min(len(old), len(new))
    a = 0
    while a < limit and old[a] == new[a]:
        a += 1
    tail = 0
    while tail < limit - a and old[-1 - tail] == new[-1 - tail]:
        tail += 1
    return a, len(old) - tail, new[a : len(new) - tail]


__all__ = ["FileBuffer", "TextBuffer"]
