# どこで: `src/pitschpatsch/core/errors.py`。
# 何を: 解析・評価・書き戻しで使う例外型を定義する。
# なぜ: 失敗の種類ごとに回復方針（保持/破棄/報告）が異なるため。

from __future__ import annotations


class PitschpatschError(Exception):
    """pitschpatsch の例外の基底。"""


class ParseError(PitschpatschError):
    """ソースが構文的に不正。

    line/column は 0-based。
    """

    def __init__(self, message: str, *, line: int = 0, column: int = 0, offset: int = 0) -> None:
        super().__init__(f"{message} (line {int(line) + 1}, column {int(column) + 1})")
        self.reason = str(message)
        self.line = int(line)
        self.column = int(column)
        self.offset = int(offset)


class ClassificationMiss(PitschpatschError):
    """関数/引数名を解決できなかった（ログ専用で、送出はしない）。"""


class EvalError(PitschpatschError):
    """実行サンドボックスが失敗した。"""


class WriteBackConflict(PitschpatschError):
    """debounce 中にエディタの内容が外部で変わった。"""


__all__ = [
    "PitschpatschError",
    "ParseError",
    "ClassificationMiss",
    "EvalError",
    "WriteBackConflict",
]
