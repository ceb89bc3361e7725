from pitschpatsch import create_session
from pitschpatsch.core.analysis.sites import EvalRange, Position
from pitschpatsch.core.runtime_config import SyncConfig
from pitschpatsch.core.sync.state import SyncState
from pitschpatsch.core.sync.timer import ManualScheduler
from pitschpatsch.interactive.editor.buffer import TextBuffer
from pitschpatsch.interactive.editor.sandbox import CallbackSandbox
from pitschpatsch.interactive.toolkit.headless import HeadlessToolkit

SKETCH = "osc(10).out()\n\nshape(4, 0.3).out(o1)"


def test_defaults_are_headless() -> None:
    session = create_session(TextBuffer(SKETCH), CallbackSandbox(lambda code: None))
    assert isinstance(session.toolkit, HeadlessToolkit)
    assert isinstance(session.scheduler, ManualScheduler)
    assert session.coordinator.state is SyncState.IDLE


def test_evaluating_a_block_binds_only_that_block() -> None:
    buffer = TextBuffer(SKETCH)
    codes: list[str] = []
    session = create_session(buffer, CallbackSandbox(codes.append))

    buffer.evaluate_block(line=2)
    labels = [c.label for c in session.toolkit.bindings(session.panel.parameters_folder)]
    assert labels == ["sides", "radius", "output"]

    session.toolkit.binding("sides").set_value(6)
    assert codes == ["shape(6, 0.3).out(o1)"]
    session.scheduler.advance(1.0)
    assert buffer.text == "osc(10).out()\n\nshape(6, 0.3).out(o1)"


def test_session_evaluate_uses_given_range() -> None:
    buffer = TextBuffer(SKETCH)
    session = create_session(
        buffer,
        CallbackSandbox(lambda code: None),
        sync_config=SyncConfig(debounce_ms=10),
    )
    result = session.evaluate(EvalRange(Position(0, 0), Position(0, 13)))
    assert [s.raw_text for s in result.sites] == ["10"]
    assert session.coordinator.eval_range.end == Position(0, 13)


def test_end_to_end_edit_write_back_and_external_edit() -> None:
    buffer = TextBuffer("osc(10, 0.1).out()")
    codes: list[str] = []
    session = create_session(buffer, CallbackSandbox(codes.append))
    buffer.evaluate_all()
    toolkit = session.toolkit

    toolkit.binding("sync").set_value(0.25)
    session.scheduler.advance(1.0)
    assert buffer.text == "osc(10, 0.25).out()"

    # 外部からの編集は再解析され、コントロールに反映される。
    buffer.replace_range("30", Position(0, 4), Position(0, 6))
    assert toolkit.binding("frequency").value == 30.0
    assert toolkit.binding("sync").value == 0.25
