# どこで: `src/pitschpatsch/core/parameters/descriptor.py`。
# 何を: サイト 1 つ分の意味付け（関数/引数名/型/既定値）を表す ParameterDescriptor を定義する。
# なぜ: グルーピング・GUI 生成・eval コード生成が同じ識別子（site_index/key）を共有するため。

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Literal

ParamType = Literal["float", "select", "color-component", "point-component"]

UNKNOWN_FUNCTION = "unknown"


@dataclass(frozen=True, slots=True)
class ParameterDescriptor:
    """分類済みパラメータ。

    Notes
    -----
    site_index はサイトの index と一致する。
    line/column はサイトの、function_line/function_column は callee 名のドキュメント座標。
    """

    site_index: int
    function_name: str
    ordinal: int
    name: str
    param_type: ParamType
    default: Any
    value: Any
    function_id: str
    key: str
    line: int = 0
    column: int = 0
    function_line: int = 0
    function_column: int = 0
    choices: tuple[str, ...] = ()

    @property
    def resolved(self) -> bool:
        return self.function_name != UNKNOWN_FUNCTION

    @property
    def is_select(self) -> bool:
        return self.param_type == "select"

    def with_value(self, value: Any) -> ParameterDescriptor:
        return replace(self, value=value)


def make_function_id(function_name: str, line: int, column: int) -> str:
    """`{name}_line{L}_pos{C}` 形式の関数呼び出し ID を返す。"""

    return f"{function_name}_line{int(line)}_pos{int(column)}"


def make_value_key(function_name: str, name: str, line: int, column: int) -> str:
    """`{function}_{name}_line{L}_pos{C}_value` 形式のキーを返す。

    arrow 評価モードで JS の識別子としてそのまま使う。
    """

    return f"{function_name}_{name}_line{int(line)}_pos{int(column)}_value"


def param_type_for(name: str, *, reference: bool = False) -> ParamType:
    """パラメータ名からコントロール用の型を推定する。"""

    if reference:
        return "select"
    if name in {"r", "g", "b"}:
        return "color-component"
    if name in {"xMult", "yMult"} or name.endswith(("X", "x", "Y", "y")):
        return "point-component"
    return "float"


__all__ = [
    "ParamType",
    "ParameterDescriptor",
    "UNKNOWN_FUNCTION",
    "make_function_id",
    "make_value_key",
    "param_type_for",
]
