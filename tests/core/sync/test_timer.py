import pytest

from pitschpatsch.core.sync.timer import ManualScheduler


def test_timers_fire_in_due_order_only_after_advance() -> None:
    scheduler = ManualScheduler()
    fired: list[str] = []
    scheduler.call_later(2.0, lambda: fired.append("late"))
    scheduler.call_later(1.0, lambda: fired.append("early"))
    scheduler.call_later(1.0, lambda: fired.append("early-2"))

    assert scheduler.advance(0.5) == 0
    assert fired == []
    assert scheduler.advance(1.0) == 2
    assert fired == ["early", "early-2"]
    assert scheduler.advance(10) == 1
    assert fired == ["early", "early-2", "late"]
    assert scheduler.now == pytest.approx(11.5)


def test_cancelled_timer_never_fires() -> None:
    scheduler = ManualScheduler()
    fired: list[int] = []
    handle = scheduler.call_later(1.0, lambda: fired.append(1))
    assert scheduler.pending() == 1
    handle.cancel()
    assert handle.cancelled
    assert scheduler.pending() == 0
    assert scheduler.advance(5) == 0
    assert fired == []


def test_callbacks_may_schedule_within_same_advance() -> None:
    scheduler = ManualScheduler()
    fired: list[float] = []

    def first() -> None:
        fired.append(scheduler.now)
        scheduler.call_later(1.0, lambda: fired.append(scheduler.now))

    scheduler.call_later(1.0, first)
    scheduler.advance(3.0)
    assert fired == [1.0, 2.0]


def test_negative_delay_is_rejected() -> None:
    with pytest.raises(ValueError):
        ManualScheduler().call_later(-1, lambda: None)
