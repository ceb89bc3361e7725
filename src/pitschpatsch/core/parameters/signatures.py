# どこで: `src/pitschpatsch/core/parameters/signatures.py`。
# 何を: Hydra 変換関数の引数シグネチャ（名前/既定値）のレジストリを提供する。
# なぜ: 数値リテラルの「関数名 + 引数位置」から人が読めるパラメータ名を引くため。

from __future__ import annotations

from collections.abc import ItemsView, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Sequence


@dataclass(frozen=True, slots=True)
class ParamSignature:
    """関数引数 1 つ分のシグネチャ。"""

    name: str
    default: Any = None
    kind: str = "float"  # "float" | "vec4" | "texture" | "output"


@dataclass(frozen=True, slots=True)
class FunctionSignature:
    name: str
    category: str
    params: tuple[ParamSignature, ...]

    def param_at(self, ordinal: int) -> ParamSignature | None:
        if 0 <= int(ordinal) < len(self.params):
            return self.params[int(ordinal)]
        return None


class SignatureRegistry:
    """関数名 → FunctionSignature の対応表。

    Notes
    -----
    グローバルなインスタンスは持たない。利用側は `default_registry()` で生成し、
    Analyzer/Classifier へ明示的に渡す。
    """

    def __init__(self) -> None:
        self._items: dict[str, FunctionSignature] = {}

    def register(
        self,
        name: str,
        params: Sequence[ParamSignature | tuple[str, Any] | str],
        *,
        category: str = "custom",
        overwrite: bool = True,
    ) -> FunctionSignature:
        """関数シグネチャを登録して返す。

        params の要素は ParamSignature / (name, default) / name のいずれか。
        """

        key = str(name)
        if not key:
            raise ValueError("関数名は空にできない")
        if not overwrite and key in self._items:
            raise ValueError(f"関数 '{key}' は既に登録されている")
        normalized: list[ParamSignature] = []
        for p in params:
            if isinstance(p, ParamSignature):
                normalized.append(p)
            elif isinstance(p, str):
                normalized.append(ParamSignature(p))
            else:
                p_name, p_default = p
                normalized.append(ParamSignature(str(p_name), p_default))
        sig = FunctionSignature(key, str(category), tuple(normalized))
        self._items[key] = sig
        return sig

    def get(self, name: str) -> FunctionSignature | None:
        return self._items.get(str(name))

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __len__(self) -> int:
        return len(self._items)

    def items(self) -> ItemsView[str, FunctionSignature]:
        return self._items.items()

    def names(self) -> tuple[str, ...]:
        """登録名を長い順に返す（部分一致の曖昧さを避けるため）。"""

        return tuple(sorted(self._items, key=lambda n: (-len(n), n)))

    def param(self, function_name: str, ordinal: int) -> ParamSignature | None:
        """関数名と引数位置からシグネチャを返す。無ければ None。"""

        sig = self._items.get(str(function_name))
        if sig is None:
            return None
        return sig.param_at(ordinal)


def _tex(name: str = "texture") -> ParamSignature:
    return ParamSignature(name, None, "texture")


# Hydra の glsl 変換関数（カテゴリ → 関数名 → 引数）。
HYDRA_SIGNATURES: Mapping[str, Mapping[str, tuple[ParamSignature, ...]]] = {
    "source": {
        "noise": (ParamSignature("scale", 10), ParamSignature("offset", 0.1)),
        "voronoi": (
            ParamSignature("scale", 5),
            ParamSignature("speed", 0.3),
            ParamSignature("blending", 0.3),
        ),
        "osc": (
            ParamSignature("frequency", 60),
            ParamSignature("sync", 0.1),
            ParamSignature("offset", 0),
        ),
        "shape": (
            ParamSignature("sides", 3),
            ParamSignature("radius", 0.3),
            ParamSignature("smoothing", 0.01),
        ),
        "gradient": (ParamSignature("speed", 0),),
        "src": (_tex("tex"),),
        "solid": (
            ParamSignature("r", 0),
            ParamSignature("g", 0),
            ParamSignature("b", 0),
            ParamSignature("a", 1),
        ),
    },
    "coord": {
        "rotate": (ParamSignature("angle", 10), ParamSignature("speed", 0)),
        "scale": (
            ParamSignature("amount", 1.5),
            ParamSignature("xMult", 1),
            ParamSignature("yMult", 1),
            ParamSignature("offsetX", 0.5),
            ParamSignature("offsetY", 0.5),
        ),
        "pixelate": (ParamSignature("pixelX", 20), ParamSignature("pixelY", 20)),
        "repeat": (
            ParamSignature("repeatX", 3),
            ParamSignature("repeatY", 3),
            ParamSignature("offsetX", 0),
            ParamSignature("offsetY", 0),
        ),
        "repeatX": (ParamSignature("reps", 3), ParamSignature("offset", 0)),
        "repeatY": (ParamSignature("reps", 3), ParamSignature("offset", 0)),
        "kaleid": (ParamSignature("nSides", 4),),
        "scroll": (
            ParamSignature("scrollX", 0.5),
            ParamSignature("scrollY", 0.5),
            ParamSignature("speedX", 0),
            ParamSignature("speedY", 0),
        ),
        "scrollX": (ParamSignature("scrollX", 0.5), ParamSignature("speed", 0)),
        "scrollY": (ParamSignature("scrollY", 0.5), ParamSignature("speed", 0)),
    },
    "color": {
        "posterize": (ParamSignature("bins", 3), ParamSignature("gamma", 0.6)),
        "shift": (
            ParamSignature("r", 0.5),
            ParamSignature("g", 0),
            ParamSignature("b", 0),
            ParamSignature("a", 0),
        ),
        "invert": (ParamSignature("amount", 1),),
        "contrast": (ParamSignature("amount", 1.6),),
        "brightness": (ParamSignature("amount", 0.4),),
        "luma": (ParamSignature("threshold", 0.5), ParamSignature("tolerance", 0.1)),
        "thresh": (ParamSignature("threshold", 0.5), ParamSignature("tolerance", 0.04)),
        "color": (
            ParamSignature("r", 1),
            ParamSignature("g", 1),
            ParamSignature("b", 1),
            ParamSignature("a", 1),
        ),
        "saturate": (ParamSignature("amount", 2),),
        "hue": (ParamSignature("hue", 0.4),),
        "colorama": (ParamSignature("amount", 0.005),),
        "sum": (ParamSignature("scale", (1, 1, 1, 1), "vec4"),),
        "r": (ParamSignature("scale", 1), ParamSignature("offset", 0)),
        "g": (ParamSignature("scale", 1), ParamSignature("offset", 0)),
        "b": (ParamSignature("scale", 1), ParamSignature("offset", 0)),
        "a": (ParamSignature("scale", 1), ParamSignature("offset", 0)),
    },
    "combine": {
        "add": (_tex(), ParamSignature("amount", 1)),
        "sub": (_tex(), ParamSignature("amount", 1)),
        "layer": (_tex(),),
        "blend": (_tex(), ParamSignature("amount", 0.5)),
        "mult": (_tex(), ParamSignature("amount", 1)),
        "diff": (_tex(),),
        "mask": (_tex(),),
    },
    "combineCoord": {
        "modulateRepeat": (
            _tex(),
            ParamSignature("repeatX", 3),
            ParamSignature("repeatY", 3),
            ParamSignature("offsetX", 0.5),
            ParamSignature("offsetY", 0.5),
        ),
        "modulateRepeatX": (_tex(), ParamSignature("reps", 3), ParamSignature("offset", 0.5)),
        "modulateRepeatY": (_tex(), ParamSignature("reps", 3), ParamSignature("offset", 0.5)),
        "modulateKaleid": (_tex(), ParamSignature("nSides", 4)),
        "modulateScrollX": (_tex(), ParamSignature("scrollX", 0.5), ParamSignature("speed", 0)),
        "modulateScrollY": (_tex(), ParamSignature("scrollY", 0.5), ParamSignature("speed", 0)),
        "modulate": (_tex(), ParamSignature("amount", 0.1)),
        "modulateScale": (_tex(), ParamSignature("multiple", 1), ParamSignature("offset", 1)),
        "modulatePixelate": (
            _tex(),
            ParamSignature("multiple", 10),
            ParamSignature("offset", 3),
        ),
        "modulateRotate": (_tex(), ParamSignature("multiple", 1), ParamSignature("offset", 0)),
        "modulateHue": (_tex(), ParamSignature("amount", 1)),
    },
    "output": {
        "out": (ParamSignature("output", "o0", "output"),),
        "render": (ParamSignature("output", "o0", "output"),),
    },
}


def default_registry(
    extra: Iterable[tuple[str, Sequence[ParamSignature | tuple[str, Any] | str]]] = (),
) -> SignatureRegistry:
    """Hydra の変換関数表を登録した新しいレジストリを返す。"""

    registry = SignatureRegistry()
    for category, functions in HYDRA_SIGNATURES.items():
        for name, params in functions.items():
            registry.register(name, params, category=category)
    for name, params in extra:
        registry.register(name, params)
    return registry


__all__ = [
    "FunctionSignature",
    "HYDRA_SIGNATURES",
    "ParamSignature",
    "SignatureRegistry",
    "default_registry",
]
