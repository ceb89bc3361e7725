# どこで: `src/pitschpatsch/core/codegen/__init__.py`。
# 何を: コード再生成の公開エイリアスをまとめる。
# なぜ: 上位層から最小インポートで使えるようにするため。

from .eval_code import EVAL_MODES, EvalMode, arrow_code, static_code
from .formatter import Replacement, format_number, generate_code

__all__ = [
    "EVAL_MODES",
    "EvalMode",
    "arrow_code",
    "static_code",
    "Replacement",
    "format_number",
    "generate_code",
]
