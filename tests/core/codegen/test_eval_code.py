from pitschpatsch.core.analysis.sites import collect_sites
from pitschpatsch.core.analysis.syntax import parse
from pitschpatsch.core.codegen.eval_code import EVAL_MODES, arrow_code, static_code
from pitschpatsch.core.parameters.classifier import classify_all
from pitschpatsch.core.parameters.signatures import default_registry


def _prepared(text: str):
    program = parse(text)
    sites = collect_sites(text, program=program)
    descriptors = classify_all(text, sites, default_registry())
    return program, sites, descriptors


def test_modes() -> None:
    assert EVAL_MODES == ("static", "arrow")


def test_static_code_embeds_literals() -> None:
    text = "osc(10).out(o0)"
    program, sites, _ = _prepared(text)
    assert static_code(program, text, {0: 42, 1: "o1"}, sites=sites) == "osc(42).out(o1)"


def test_arrow_code_routes_numbers_through_globals() -> None:
    text = "osc(10, 0.1).out(o0)"
    program, sites, descriptors = _prepared(text)
    code = arrow_code(
        program, text, {0: 20, 2: "o2"}, sites=sites, descriptors=descriptors
    )
    assert code == (
        "osc_frequency_line0_pos4_value = 20;\n"
        "osc(() => osc_frequency_line0_pos4_value, 0.1).out(o2)"
    )


def test_arrow_code_without_numeric_edits_is_plain_body() -> None:
    text = "osc(10).out(o0)"
    program, sites, descriptors = _prepared(text)
    code = arrow_code(program, text, {1: "o3"}, sites=sites, descriptors=descriptors)
    assert code == "osc(10).out(o3)"


def test_arrow_code_without_descriptor_keys_falls_back_to_literals() -> None:
    text = "osc(10)"
    program, sites, _ = _prepared(text)
    assert arrow_code(program, text, {0: 5}, sites=sites) == "osc(5)"


def test_arrow_assignments_follow_site_order() -> None:
    text = "osc(1).rotate(2)"
    program, sites, descriptors = _prepared(text)
    code = arrow_code(program, text, {1: 3, 0: 4}, sites=sites, descriptors=descriptors)
    lines = code.split("\n")
    assert lines[0].startswith("osc_frequency_")
    assert lines[1].startswith("rotate_angle_")
    assert lines[2] == (
        "osc(() => osc_frequency_line0_pos4_value)"
        ".rotate(() => rotate_angle_line0_pos14_value)"
    )
