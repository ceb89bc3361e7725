import logging

from pitschpatsch.core.analysis.sites import Position, collect_sites
from pitschpatsch.core.parameters.classifier import classify, classify_all
from pitschpatsch.core.parameters.signatures import default_registry


def _describe(text: str, origin: Position | None = None):
    sites = collect_sites(text, origin=origin)
    return classify_all(text, sites, default_registry(), origin=origin)


def test_call_arguments_resolve_to_signature_names() -> None:
    ds = _describe("noise(3, 0.2).rotate(0.5).out(o1)")
    assert [(d.function_name, d.name) for d in ds] == [
        ("noise", "scale"),
        ("noise", "offset"),
        ("rotate", "angle"),
        ("out", "output"),
    ]
    assert [d.default for d in ds] == [10, 0.1, 10, "o0"]
    assert [d.param_type for d in ds] == ["float", "float", "float", "select"]
    assert ds[3].choices == ("o0", "o1", "o2", "o3")
    assert ds[3].value == "o1"


def test_identifiers_use_callee_and_site_positions() -> None:
    ds = _describe("osc(10)\n  .color(1, 0.5, 0)")
    osc, r, g, b = ds
    assert osc.function_id == "osc_line0_pos0"
    assert osc.key == "osc_frequency_line0_pos4_value"
    assert r.function_id == "color_line1_pos3"
    assert r.key == "color_r_line1_pos9_value"
    assert {r.function_id, g.function_id, b.function_id} == {"color_line1_pos3"}
    assert [d.param_type for d in (r, g, b)] == ["color-component"] * 3


def test_origin_shifts_document_coordinates() -> None:
    ds = _describe("osc(10)", origin=Position(5, 2))
    assert ds[0].function_id == "osc_line5_pos2"
    assert ds[0].key == "osc_frequency_line5_pos6_value"


def test_heuristic_finds_enclosing_call_for_nested_literal() -> None:
    ds = _describe("osc(() => 10 * Math.sin(time))")
    assert len(ds) == 1
    assert (ds[0].function_name, ds[0].name) == ("osc", "frequency")


def test_heuristic_counts_top_level_commas() -> None:
    ds = _describe("osc(60, () => 0.5 * time)")
    assert [(d.function_name, d.name) for d in ds] == [("osc", "frequency"), ("osc", "sync")]


def test_unknown_functions_fall_back_to_positional_names(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="pitschpatsch.core.parameters.classifier")
    ds = _describe("foo(1, 2)")
    assert [d.function_name for d in ds] == ["unknown", "unknown"]
    assert [d.name for d in ds] == ["param0", "param1"]
    assert [d.default for d in ds] == [None, None]
    assert not ds[0].resolved
    assert ds[0].function_id == "unknown_line0_pos0"
    assert "classification miss" in caplog.text


def test_extra_arguments_beyond_signature_are_unknown() -> None:
    ds = _describe("noise(3, 0.1, 7)")
    assert [d.name for d in ds] == ["scale", "offset", "param2"]
    assert ds[2].function_name == "unknown"


def test_point_components_are_typed() -> None:
    ds = _describe("scroll(0.1, 0.2, 0.3, 0.4)")
    assert [d.param_type for d in ds] == ["point-component"] * 4


def test_classify_single_site_matches_classify_all() -> None:
    text = "shape(4, 0.3)"
    sites = collect_sites(text)
    registry = default_registry()
    assert classify(text, sites[1], registry) == classify_all(text, sites, registry)[1]
