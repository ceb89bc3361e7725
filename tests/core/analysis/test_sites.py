from pitschpatsch.core.analysis.sites import (
    EvalRange,
    NumericLiteralSite,
    Position,
    ReferenceSite,
    collect_sites,
    find_numeric_literals,
    find_reference_sites,
)


def _raws(sites) -> list[str]:
    return [s.raw_text for s in sites]


def test_numeric_sites_in_offset_order_with_positional_index() -> None:
    text = "osc(60, 0.1, 1.5)\n  .rotate(.5)\n  .out()"
    sites = find_numeric_literals(text, None)
    assert _raws(sites) == ["60", "0.1", "1.5", ".5"]
    assert [s.index for s in sites] == [0, 1, 2, 3]
    assert [s.offset for s in sites] == sorted(s.offset for s in sites)
    assert all(text[s.offset : s.offset + s.length] == s.raw_text for s in sites)
    assert (sites[3].line, sites[3].column) == (1, 10)
    assert sites[3].value == 0.5


def test_strings_comments_and_templates_yield_no_sites() -> None:
    text = "osc(10) // 20\n/* 30 */ s0.initImage('img40.png')\nsrc(s0).blend(o0, `${50}`).out()"
    sites = find_numeric_literals(text, None)
    assert _raws(sites) == ["10"]


def test_unary_sign_is_folded_into_the_site() -> None:
    text = "scroll(-0.5, +2, - 3)"
    sites = find_numeric_literals(text, None)
    assert _raws(sites) == ["-0.5", "+2", "- 3"]
    assert [s.value for s in sites] == [-0.5, 2.0, -3.0]
    assert sites[0].offset == text.index("-0.5")


def test_sign_on_parenthesized_literal_is_not_folded() -> None:
    text = "osc(-(5))"
    sites = find_numeric_literals(text, None)
    assert _raws(sites) == ["5"]
    assert sites[0].offset == text.index("5")


def test_object_keys_are_not_sites_but_values_are() -> None:
    sites = find_numeric_literals("const m = {1: 2, [3]: 4}", None)
    assert _raws(sites) == ["2", "3", "4"]


def test_skip_marker_lines_are_ignored() -> None:
    text = "loadScript('lib.js', 10)\nosc(20).out()"
    assert _raws(find_numeric_literals(text, None)) == ["20"]
    assert _raws(find_numeric_literals(text, None, skip_markers=())) == ["10", "20"]


def test_call_context_records_function_and_argument_index() -> None:
    sites = find_numeric_literals("osc(1, 2).color(3, 4 * time)", None)
    ctx = [s.context for s in sites]
    assert (ctx[0].function_name, ctx[0].argument_index) == ("osc", 0)
    assert (ctx[1].function_name, ctx[1].argument_index) == ("osc", 1)
    assert (ctx[2].function_name, ctx[2].argument_index) == ("color", 0)
    assert ctx[3] is None


def test_eval_range_boundaries_are_exclusive_at_start() -> None:
    # "10" を範囲の開始位置ちょうどに置くと対象外になる。
    text = "10\nosc(20).out()"
    eval_range = EvalRange(Position(0, 0), Position(1, 13))
    assert _raws(find_numeric_literals(text, eval_range)) == ["20"]


def test_eval_range_excludes_literals_outside() -> None:
    text = "osc(1).out()\nnoise(2).out(o1)\nshape(3).out(o2)"
    eval_range = EvalRange(Position(1, 0), Position(1, 16))
    sites = find_numeric_literals(text, eval_range, origin=Position(0, 0))
    assert _raws(sites) == ["2"]
    assert sites[0].index == 0
    assert (sites[0].line, sites[0].column) == (1, 6)


def test_literal_crossing_range_end_is_excluded() -> None:
    text = "osc(123)"
    eval_range = EvalRange(Position(0, 0), Position(0, 5))
    assert find_numeric_literals(text, eval_range, origin=Position(0, 0)) == []


def test_origin_defaults_to_eval_range_start() -> None:
    block = "noise(2).out(o1)"
    eval_range = EvalRange(Position(4, 0), Position(4, len(block)))
    sites = find_numeric_literals(block, eval_range)
    assert (sites[0].line, sites[0].column) == (4, 6)
    # offset はブロック内の相対位置のまま。
    assert sites[0].offset == 6


def test_first_line_column_is_shifted_by_origin_column() -> None:
    block = "osc(7)\nnoise(8)"
    eval_range = EvalRange(Position(2, 10), Position(3, 8))
    sites = find_numeric_literals(block, eval_range)
    assert [(s.line, s.column) for s in sites] == [(2, 14), (3, 6)]


def test_reference_sites_are_call_arguments_only() -> None:
    text = "src(s0).blend(o1).out(o2)\nconst x = o3"
    refs = find_reference_sites(text, None, first_index=5)
    assert [(r.name, r.kind, r.index) for r in refs] == [
        ("s0", "source", 5),
        ("o1", "output", 6),
        ("o2", "output", 7),
    ]
    assert refs[1].choices == ("o0", "o1", "o2", "o3")
    assert refs[0].choices == ("s0", "s1", "s2", "s3")
    assert refs[2].raw_text == "o2" and refs[2].value == "o2"


def test_collect_sites_numbers_first_then_references() -> None:
    text = "osc(o0, 10).out(o1)"
    sites = collect_sites(text)
    assert [type(s) for s in sites] == [NumericLiteralSite, ReferenceSite, ReferenceSite]
    assert [s.index for s in sites] == [0, 1, 2]
    assert [s.raw_text for s in sites] == ["10", "o0", "o1"]


def test_eval_range_covering() -> None:
    assert EvalRange.covering("osc(1)\n.out()") == EvalRange(Position(0, 0), Position(1, 6))
    assert EvalRange.covering("osc(1)", origin=Position(3, 4)) == EvalRange(
        Position(3, 4), Position(3, 10)
    )
    assert EvalRange.covering("a\nbc", origin=Position(3, 4)) == EvalRange(
        Position(3, 4), Position(4, 2)
    )
