import pytest

from pitschpatsch.core.analysis.lexer import LineIndex, tokenize
from pitschpatsch.core.errors import ParseError


def _kinds(text: str) -> list[tuple[str, str]]:
    return [(t.kind, t.text) for t in tokenize(text) if t.kind != "eof"]


def test_numbers_cover_decimal_forms() -> None:
    got = [t.text for t in tokenize("1 2.5 .5 1e3 2.5e-2 0xff 0b101 3.") if t.kind == "number"]
    assert got == ["1", "2.5", ".5", "1e3", "2.5e-2", "0xff", "0b101", "3."]


def test_numeric_separators_stay_in_one_token() -> None:
    got = [t.text for t in tokenize("1_000 2.5_5 0xff_ff 1e1_0") if t.kind == "number"]
    assert got == ["1_000", "2.5_5", "0xff_ff", "1e1_0"]


def test_numbers_inside_strings_and_comments_are_not_numbers() -> None:
    tokens = _kinds("osc('10', \"20\") // 30\n/* 40 */ `50`")
    assert ("number", "10") not in tokens
    assert ("string", "'10'") in tokens
    assert ("string", '"20"') in tokens
    assert ("comment", "// 30") in tokens
    assert ("comment", "/* 40 */") in tokens
    assert ("template", "`50`") in tokens
    assert not any(kind == "number" for kind, _ in tokens)


def test_member_access_dot_is_punct_not_number() -> None:
    tokens = _kinds("osc(1).out()")
    assert tokens[:5] == [
        ("ident", "osc"),
        ("punct", "("),
        ("number", "1"),
        ("punct", ")"),
        ("punct", "."),
    ]


def test_longest_punctuator_wins() -> None:
    assert [t for _, t in _kinds("a => b ** c === d")] == ["a", "=>", "b", "**", "c", "===", "d"]


def test_conditional_before_leading_dot_number() -> None:
    tokens = _kinds("a?.5:1")
    assert ("punct", "?") in tokens
    assert ("number", ".5") in tokens


def test_token_positions_and_newline_flag() -> None:
    tokens = tokenize("osc(1)\n  .out()")
    dot = [t for t in tokens if t.text == "."][0]
    assert (dot.line, dot.column) == (1, 2)
    assert dot.newline_before is True
    number = [t for t in tokens if t.kind == "number"][0]
    assert (number.start, number.end) == (4, 5)
    assert number.newline_before is False


def test_keep_comments_false_drops_comments() -> None:
    assert [t.kind for t in tokenize("// hi\n1", keep_comments=False)] == ["number", "eof"]


@pytest.mark.parametrize(
    "text",
    ["osc('abc", "/* never closed", "`tpl", "osc(1) # 2", "10px", "1__0", "1_"],
)
def test_malformed_input_raises_parse_error(text: str) -> None:
    with pytest.raises(ParseError):
        tokenize(text)


def test_parse_error_carries_position() -> None:
    with pytest.raises(ParseError) as excinfo:
        tokenize("osc(1)\nfoo('x")
    err = excinfo.value
    assert (err.line, err.column) == (1, 4)
    assert "line 2, column 5" in str(err)


def test_line_index_round_trip() -> None:
    text = "ab\ncde\n\nf"
    index = LineIndex(text)
    assert index.line_count == 4
    for offset in range(len(text)):
        line, col = index.position(offset)
        assert index.offset(line, col) == offset
    assert index.position(3) == (1, 0)
    assert index.position(8) == (3, 0)
