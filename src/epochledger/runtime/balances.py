"""Balance query engine.

Read-only: nothing here touches a bucket list. Epochs outside the valid
range count as zero whether or not they have been physically evicted, so
correctness never depends on refresh having run.
"""

from __future__ import annotations

from typing import Mapping, Optional, Tuple

from epochledger.ledger.state import EpochAccountState
from epochledger.ledger.window import SlidingWindow

StateMap = Mapping[Tuple[int, str], EpochAccountState]


def partial_balance(window: SlidingWindow, state: Optional[EpochAccountState], pointer: int) -> int:
    """Spendable part of an epoch that may hold buckets past the expiry boundary.

    Expired buckets always form a prefix of the list (positions are ordered),
    so the walk stops at the first live bucket.
    """
    if state is None or state.total_balance <= 0:
        return 0
    expired = 0
    for position, amount in state.buckets.items():
        if not window.is_expired(position, pointer):
            break
        expired += amount
    return state.total_balance - expired


def _wholesale(state: Optional[EpochAccountState]) -> int:
    return int(state.total_balance) if state is not None else 0


def balance_over_range(states: StateMap, window: SlidingWindow, account: str, first: int, last: int, pointer: int) -> int:
    """Balance of `account` over epochs first..last, with first read partially."""
    if last < first:
        return 0
    total = partial_balance(window, states.get((first, account)), pointer)
    for epoch in range(first + 1, last + 1):
        total += _wholesale(states.get((epoch, account)))
    return total


def balance_of(states: StateMap, window: SlidingWindow, account: str, pointer: int) -> int:
    first, last = window.index_range(pointer)
    if first == last:
        return partial_balance(window, states.get((first, account)), pointer)
    return balance_over_range(states, window, account, first, last, pointer)


def balance_of_at_epoch(states: StateMap, window: SlidingWindow, epoch: int, account: str, pointer: int) -> int:
    first, last = window.index_range(pointer)
    e = int(epoch)
    if e < first or e > last:
        return 0
    state = states.get((e, account))
    if e == first:
        return partial_balance(window, state, pointer)
    return _wholesale(state)


__all__ = ["balance_of", "balance_of_at_epoch", "balance_over_range", "partial_balance"]
