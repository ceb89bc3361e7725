import logging

import pytest

from pitschpatsch.core.analysis.sites import collect_sites
from pitschpatsch.core.analysis.syntax import parse
from pitschpatsch.core.codegen.formatter import format_number, generate_code


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0.12345, "0.123"),
        (0.5, "0.5"),
        (-0.123, "-0.123"),
        (0.0, "0"),
        (-0.0001, "0"),
        (1.0, "1"),
        (9.5, "9.5"),
        (3.14159, "3.14"),
        (-2.5, "-2.5"),
        (10.4, "10"),
        (10.5, "11"),
        (11, "11"),
        (-10.5, "-10"),
        (1234.56, "1235"),
        (float("nan"), "NaN"),
        (float("inf"), "Infinity"),
        (float("-inf"), "-Infinity"),
    ],
)
def test_format_number(value: float, expected: str) -> None:
    assert format_number(value) == expected


def _gen(text: str, values):
    return generate_code(parse(text), text, values)


def test_replaces_only_mapped_sites() -> None:
    assert _gen("osc(10).out()", {0: 20}) == "osc(20).out()"
    assert _gen("osc(10, 0.1, 0).out()", {1: 0.25}) == "osc(10, 0.25, 0).out()"


def test_unchanged_values_round_trip_identically() -> None:
    text = "osc(10, 0.1, 1.5)\n  .rotate(-0.5)\n  .out(o1)"
    sites = collect_sites(text)
    values = {s.index: s.value for s in sites}
    assert _gen(text, values) == text


def test_comments_and_indentation_are_preserved() -> None:
    text = "// intro\nosc(10) // freq\n\t.color(1, 0.5, 0) /* rgb */\n\t.out()"
    out = _gen(text, {0: 30, 2: 0.75})
    assert out == "// intro\nosc(30) // freq\n\t.color(1, 0.75, 0) /* rgb */\n\t.out()"


def test_signed_site_is_replaced_with_its_sign() -> None:
    assert _gen("scroll(-0.5)", {0: 0.25}) == "scroll(0.25)"


def test_reference_sites_take_string_values() -> None:
    assert _gen("src(s0).out(o1)", {1: "o2"}) == "src(s0).out(o2)"


def test_explicit_sites_limit_replacement() -> None:
    text = "osc(10).rotate(2)"
    program = parse(text)
    only_second = [s for s in collect_sites(text) if s.index == 1]
    assert generate_code(program, text, {0: 1, 1: 3}, sites=only_second) == "osc(10).rotate(3)"


def test_degenerate_inputs_return_original() -> None:
    assert generate_code(None, "osc(1)", {0: 2}) == "osc(1)"
    assert generate_code(parse("osc(1)"), None, {0: 2}) == ""
    assert _gen("osc(1)", {}) == "osc(1)"
    assert _gen("osc(1)", None) == "osc(1)"


def test_bare_number_result_is_rejected(caplog) -> None:
    caplog.set_level(logging.WARNING, logger="pitschpatsch.core.codegen.formatter")
    assert _gen("10", {0: 20}) == "10"
    assert "数値だけ" in caplog.text


def test_failure_falls_back_to_original(caplog) -> None:
    caplog.set_level(logging.ERROR, logger="pitschpatsch.core.codegen.formatter")
    assert _gen("osc(1)", {0: True}) == "osc(1)"
    assert "コード生成に失敗" in caplog.text
