import os

import pytest

from pitschpatsch.core.analysis.sites import EvalRange, Position
from pitschpatsch.interactive.editor.buffer import FileBuffer, TextBuffer

TEXT = "osc(10).out()\n\nnoise(3)\n  .out(o1)"


def test_get_text_by_range_and_offsets() -> None:
    buffer = TextBuffer(TEXT)
    assert buffer.get_text() == TEXT
    assert buffer.get_text(EvalRange(Position(2, 0), Position(3, 10))) == "noise(3)\n  .out(o1)"
    assert buffer.offset_of(Position(2, 0)) == 15
    assert buffer.offset_of(Position(99, 0)) == len(TEXT)
    assert buffer.offset_of(Position(0, 99)) == 13
    assert buffer.end_position() == Position(3, 10)


def test_replace_range_notifies_with_pre_change_coordinates() -> None:
    buffer = TextBuffer(TEXT)
    changes = []
    buffer.on_change(changes.append)
    buffer.replace_range("20", Position(0, 4), Position(0, 6))

    assert buffer.text.startswith("osc(20).out()")
    assert len(changes) == 1
    change = changes[0]
    assert (change.start, change.end, change.text) == (Position(0, 4), Position(0, 6), "20")


def test_replace_range_rejects_reversed_span() -> None:
    with pytest.raises(ValueError):
        TextBuffer(TEXT).replace_range("x", Position(1, 0), Position(0, 0))


def test_insert_and_set_text() -> None:
    buffer = TextBuffer("b")
    buffer.insert(Position(0, 0), "a")
    assert buffer.text == "ab"
    buffer.set_text("new\ntext")
    assert buffer.lines() == ["new", "text"]


def test_cursor_is_clamped_after_shrinking_edit() -> None:
    buffer = TextBuffer(TEXT)
    buffer.set_cursor(Position(3, 5))
    buffer.set_text("x")
    assert buffer.get_cursor() == Position(0, 1)


def test_evaluate_commands_report_ranges() -> None:
    buffer = TextBuffer(TEXT)
    ranges = []
    buffer.on_evaluate(ranges.append)

    buffer.evaluate_all()
    buffer.set_cursor(Position(3, 2))
    buffer.evaluate_line()
    buffer.evaluate_block()
    buffer.evaluate_block(line=0)

    assert ranges == [
        EvalRange(Position(0, 0), Position(3, 10)),
        EvalRange(Position(3, 0), Position(3, 10)),
        EvalRange(Position(2, 0), Position(3, 10)),
        EvalRange(Position(0, 0), Position(0, 13)),
    ]


def test_file_buffer_saves_on_every_change(tmp_path) -> None:
    path = tmp_path / "sketch.js"
    path.write_text("osc(10).out()", encoding="utf-8")
    buffer = FileBuffer(path)
    buffer.replace_range("20", Position(0, 4), Position(0, 6))
    assert path.read_text(encoding="utf-8") == "osc(20).out()"


def test_file_buffer_reload_picks_up_external_edits(tmp_path) -> None:
    path = tmp_path / "sketch.js"
    path.write_text("osc(10).out()", encoding="utf-8")
    buffer = FileBuffer(path)
    changes = []
    buffer.on_change(changes.append)

    assert buffer.reload() is False

    path.write_text("osc(30).out()", encoding="utf-8")
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))

    assert buffer.reload() is True
    assert buffer.text == "osc(30).out()"
    assert len(changes) == 1
    # 変わった部分だけが変更として通知される。
    assert (changes[0].start, changes[0].end, changes[0].text) == (Position(0, 4), Position(0, 5), "3")
    assert path.read_text(encoding="utf-8") == "osc(30).out()"


def test_file_buffer_reload_reports_multiline_span(tmp_path) -> None:
    path = tmp_path / "sketch.js"
    path.write_text("osc(10).out()\n\nnoise(3).out(o1)", encoding="utf-8")
    buffer = FileBuffer(path)
    changes = []
    buffer.on_change(changes.append)

    path.write_text("osc(10).out()\n// new\n\nnoise(3).out(o1)", encoding="utf-8")
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))

    assert buffer.reload() is True
    change = changes[0]
    assert change.end <= Position(2, 0)
    assert change.start >= Position(0, 13)
    assert buffer.text == "osc(10).out()\n// new\n\nnoise(3).out(o1)"


def test_position_at_inverts_offset_of() -> None:
    buffer = TextBuffer(TEXT)
    for pos in (Position(0, 0), Position(0, 13), Position(2, 3), Position(3, 10)):
        assert buffer.position_at(buffer.offset_of(pos)) == pos
    assert buffer.position_at(-5) == Position(0, 0)
    assert buffer.position_at(999) == buffer.end_position()
