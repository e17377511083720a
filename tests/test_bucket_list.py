from __future__ import annotations

import pytest

from epochledger.ledger.buckets import SENTINEL, BucketList


def _list(*pairs) -> BucketList:
    b = BucketList()
    for pos, amt in pairs:
        b.insert(pos, amt)
    return b


def test_insert_keeps_positions_sorted() -> None:
    b = _list((30, 3), (10, 1), (20, 2), (40, 4), (5, 9))
    assert b.to_list() == [5, 10, 20, 30, 40]
    assert b.front() == 5
    assert b.back() == 40
    assert b.total() == 19


def test_insert_accumulates_on_same_position() -> None:
    b = _list((10, 1), (20, 2))
    b.insert(20, 5)
    assert len(b) == 2
    assert b.amount_of(20) == 7
    assert list(b.items()) == [(10, 1), (20, 7)]


def test_insert_ignores_zero_amount() -> None:
    b = BucketList()
    b.insert(10, 0)
    assert b.is_empty()
    assert b.front() == SENTINEL


def test_navigation_and_remove() -> None:
    b = _list((10, 1), (20, 2), (30, 3))
    assert b.next(10) == 20
    assert b.previous(10) is None
    assert b.next(30) is None

    assert b.remove(20) == 2
    assert b.to_list() == [10, 30]
    assert b.next(10) == 30
    assert b.previous(30) == 10

    b.remove(10)
    b.remove(30)
    assert b.is_empty()
    assert b.front() == SENTINEL
    assert b.back() == SENTINEL


def test_navigation_on_missing_position_raises() -> None:
    b = _list((10, 1))
    with pytest.raises(KeyError):
        b.next(11)
    with pytest.raises(KeyError):
        b.remove(11)
    with pytest.raises(KeyError):
        b.to_list(start=11)


def test_shrink_drops_prefix_below_cutoff() -> None:
    b = _list((10, 1), (20, 2), (30, 3))
    assert b.shrink(25) == 3
    assert b.to_list() == [30]
    assert b.shrink(5) == 0
    assert b.shrink(1_000) == 3
    assert b.is_empty()


def test_decrease_unlinks_at_zero() -> None:
    b = _list((10, 5), (20, 2))
    assert b.decrease(10, 3) == 2
    assert b.amount_of(10) == 2
    assert b.decrease(10, 2) == 0
    assert 10 not in b
    assert b.front() == 20

    with pytest.raises(ValueError):
        b.decrease(20, 3)


def test_to_list_from_start_and_copy_is_independent() -> None:
    b = _list((10, 1), (20, 2), (30, 3))
    assert b.to_list(start=20) == [20, 30]

    c = b.copy()
    c.insert(40, 4)
    c.remove(10)
    assert b.to_list() == [10, 20, 30]
    assert c.to_list() == [20, 30, 40]
