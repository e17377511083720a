from __future__ import annotations

import pytest

from epochledger.ledger.window import SlidingWindow
from epochledger.runtime.errors import InvalidDuration, InvalidSize, LedgerError, WindowAlreadyConfigured


def _window(origin: int = 0, duration: int = 10, size: int = 2) -> SlidingWindow:
    w = SlidingWindow()
    w.setup(origin, duration, size, True)
    return w


def test_index_for_clamps_at_or_before_origin() -> None:
    w = _window(origin=100)
    assert w.index_for(50) == 0
    assert w.index_for(100) == 0
    assert w.index_for(109) == 0
    assert w.index_for(110) == 1
    assert w.index_for(135) == 3


def test_index_range_spans_window_size_plus_one_epochs() -> None:
    w = _window(size=2)
    assert w.index_range(5) == (0, 0)
    assert w.index_range(15) == (0, 1)
    assert w.index_range(25) == (0, 2)
    first, last = w.index_range(35)
    assert (first, last) == (1, 3)
    assert last - first + 1 == w.window_size + 1


@pytest.mark.parametrize(
    "duration,size,exc",
    [
        (0, 2, InvalidDuration),
        (31_556_927, 2, InvalidDuration),
        (10, 0, InvalidSize),
        (10, 255, InvalidSize),
    ],
)
def test_strict_setup_rejects_out_of_bounds(duration: int, size: int, exc: type) -> None:
    w = SlidingWindow()
    with pytest.raises(exc):
        w.setup(0, duration, size, True)
    assert not w.is_configured()


def test_strict_bounds_are_inclusive() -> None:
    _window(duration=1, size=1)
    _window(duration=31_556_926, size=254)


def test_non_strict_setup_only_guards_zero() -> None:
    w = SlidingWindow()
    w.setup(0, 40_000_000, 300, False)
    assert w.window_size == 300

    with pytest.raises(InvalidDuration):
        SlidingWindow().setup(0, 0, 3, False)
    with pytest.raises(InvalidSize):
        SlidingWindow().setup(0, 5, 0, False)


def test_setup_twice_requires_clear() -> None:
    w = _window()
    with pytest.raises(WindowAlreadyConfigured) as e:
        w.setup(0, 20, 3, True)
    assert e.value.reason == "window_already_configured"

    w.clear()
    assert w.index_for(1_000) == 0
    assert w.index_range(1_000) == (0, 0)

    w.setup(0, 20, 3, True)
    assert w.index_for(100) == 5


def test_epoch_bounds_and_expired_epochs() -> None:
    w = _window(origin=100, duration=10, size=2)
    assert w.epoch_bounds(2) == (120, 129)
    # at 150: epoch 5, valid 3..5
    assert w.is_epoch_expired(2, 150) is True
    assert w.is_epoch_expired(3, 150) is False
    assert w.is_epoch_expired(7, 150) is False


def test_epoch_mode_expiry_is_per_epoch() -> None:
    w = _window(duration=10, size=2)
    # minted in epoch 0: alive through epoch 2, dead from epoch 3
    assert w.is_expired(9, 29) is False
    assert w.is_expired(0, 29) is False
    assert w.is_expired(9, 30) is True


def test_sliding_mode_expiry_is_per_position() -> None:
    w = _window(duration=10, size=2)
    w.set_expiry_mode("sliding")
    assert w.expiry_span == 20
    assert w.is_expired(5, 24) is False
    assert w.is_expired(5, 25) is True
    assert w.is_expired(9, 28) is False


def test_unknown_expiry_mode_rejected() -> None:
    w = SlidingWindow()
    with pytest.raises(LedgerError) as e:
        w.set_expiry_mode("hourly")
    assert e.value.reason == "invalid_expiry_mode"
