import numpy as np

from pitschpatsch.core.analysis.sites import collect_sites
from pitschpatsch.core.parameters.classifier import classify_all
from pitschpatsch.core.parameters.descriptor import ParameterDescriptor, param_type_for
from pitschpatsch.core.parameters.grouping import detect_groups
from pitschpatsch.core.parameters.signatures import default_registry


def _groups(text: str):
    return detect_groups(classify_all(text, collect_sites(text), default_registry()))


def _shape(groups) -> list[tuple[str, str, tuple[int, ...]]]:
    return [(g.kind, g.label, g.site_indices) for g in groups]


def test_color_triplet_becomes_one_group() -> None:
    groups = _groups("osc().color(1, 0.5, 0, 1)")
    assert _shape(groups) == [("color", "color", (0, 1, 2)), ("number", "a", (3,))]
    assert groups[0].pattern == "rgb"


def test_repeated_color_calls_yield_separate_groups() -> None:
    groups = _groups("osc().color(1, 0, 0).color(0, 1, 0)")
    assert [g.kind for g in groups] == ["color", "color"]
    assert [g.site_indices for g in groups] == [(0, 1, 2), (3, 4, 5)]


def test_partial_color_stays_numbers() -> None:
    groups = _groups("osc().color(1, 0.5)")
    assert _shape(groups) == [("number", "r", (0,)), ("number", "g", (1,))]


def test_scale_pairs_special_and_suffix_points() -> None:
    groups = _groups("shape().scale(1.5, 1, 2, 0.5, 0.5)")
    assert _shape(groups) == [
        ("point", "mult", (1, 2)),
        ("point", "offset", (3, 4)),
        ("number", "amount", (0,)),
    ]
    assert [g.pattern for g in groups] == ["mult", "xy", None]


def test_scroll_pairs_position_and_speed() -> None:
    groups = _groups("osc().scroll(0.1, 0.2, 0.3, 0.4)")
    assert _shape(groups) == [("point", "scroll", (0, 1)), ("point", "speed", (2, 3))]


def test_lone_x_component_is_a_number() -> None:
    groups = _groups("osc().pixelate(20)")
    assert _shape(groups) == [("number", "pixelX", (0,))]


def test_select_members_are_never_grouped() -> None:
    groups = _groups("osc(10).out(o1)")
    assert _shape(groups) == [("number", "frequency", (0,)), ("number", "output", (1,))]


_NAMES = ("r", "g", "b", "a", "offsetX", "offsetY", "xMult", "yMult", "speedX", "speedY", "amount")


def _descriptor(i: int, name: str) -> ParameterDescriptor:
    return ParameterDescriptor(
        site_index=i,
        function_name="fx",
        ordinal=i,
        name=name,
        param_type=param_type_for(name),
        default=0,
        value=0.0,
        function_id="fx_line0_pos0",
        key=f"fx_{name}_line0_pos{i}_value",
    )


def test_groups_partition_descriptors_deterministically() -> None:
    rng = np.random.default_rng(1234)
    for _ in range(200):
        n = int(rng.integers(0, 12))
        names = [str(x) for x in rng.choice(_NAMES, size=n)]
        descriptors = [_descriptor(i, name) for i, name in enumerate(names)]

        groups = detect_groups(descriptors)
        seen = [i for g in groups for i in g.site_indices]
        assert sorted(seen) == list(range(n))
        assert detect_groups(descriptors) == groups

        for g in groups:
            if g.kind == "color":
                assert [m.name for m in g.members] == ["r", "g", "b"]
            elif g.kind == "point":
                assert len(g.members) == 2
            else:
                assert len(g.members) == 1


def test_bare_x_y_pair_is_labelled_point() -> None:
    registry = default_registry()
    registry.register("pos", [("x", 0.5), ("y", 0.5)])
    text = "pos(0.25, 0.75)"
    groups = detect_groups(classify_all(text, collect_sites(text), registry))
    assert _shape(groups) == [("point", "point", (0, 1))]
