# どこで: `src/pitschpatsch/core/parameters/__init__.py`。
# 何を: パラメータ分類/グルーピングの公開エイリアスをまとめる。
# なぜ: 上位層から最小インポートで使えるようにするため。

from .calls import CallFolder, group_by_call, ordered_call_groups
from .classifier import classify, classify_all
from .descriptor import ParameterDescriptor, ParamType, UNKNOWN_FUNCTION
from .grouping import GroupKind, ParameterGroup, detect_groups
from .signatures import FunctionSignature, ParamSignature, SignatureRegistry, default_registry

__all__ = [
    "CallFolder",
    "group_by_call",
    "ordered_call_groups",
    "classify",
    "classify_all",
    "ParameterDescriptor",
    "ParamType",
    "UNKNOWN_FUNCTION",
    "GroupKind",
    "ParameterGroup",
    "detect_groups",
    "FunctionSignature",
    "ParamSignature",
    "SignatureRegistry",
    "default_registry",
]
