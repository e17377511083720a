# src/epochledger/ledger/buckets.py
"""Ordered deposit-bucket list for one (account, epoch).

Doubly linked list keyed by position. Links live in two dicts so a node is
unlinked in O(1) by key; there are no node objects to dangle.

Invariants:
  - positions strictly increase front to back
  - a position appears at most once (inserts accumulate)
  - every stored amount is > 0
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple

# Returned by front()/back() when the list is empty.
SENTINEL: int = 0


class BucketList:
    __slots__ = ("_amounts", "_next", "_prev", "_head", "_tail")

    def __init__(self) -> None:
        self._amounts: Dict[int, int] = {}
        self._next: Dict[int, Optional[int]] = {}
        self._prev: Dict[int, Optional[int]] = {}
        self._head: Optional[int] = None
        self._tail: Optional[int] = None

    # ---- inspection ----

    def __len__(self) -> int:
        return len(self._amounts)

    def __contains__(self, position: object) -> bool:
        return position in self._amounts

    def __iter__(self) -> Iterator[int]:
        cur = self._head
        while cur is not None:
            yield cur
            cur = self._next[cur]

    def is_empty(self) -> bool:
        return self._head is None

    def front(self) -> int:
        return self._head if self._head is not None else SENTINEL

    def back(self) -> int:
        return self._tail if self._tail is not None else SENTINEL

    def next(self, position: int) -> Optional[int]:
        return self._next[int(position)]

    def previous(self, position: int) -> Optional[int]:
        return self._prev[int(position)]

    def amount_of(self, position: int) -> int:
        return int(self._amounts.get(int(position), 0))

    def items(self) -> Iterator[Tuple[int, int]]:
        for pos in self:
            yield pos, self._amounts[pos]

    def total(self) -> int:
        return sum(self._amounts.values())

    def to_list(self, start: Optional[int] = None) -> List[int]:
        """Positions front to back, optionally starting at `start` (inclusive)."""
        if start is None:
            return list(self)
        s = int(start)
        if s not in self._amounts:
            raise KeyError(s)
        out: List[int] = []
        cur: Optional[int] = s
        while cur is not None:
            out.append(cur)
            cur = self._next[cur]
        return out

    # ---- mutation ----

    def insert(self, position: int, amount: int) -> None:
        """Add `amount` at `position`, merging into an existing bucket."""
        pos = int(position)
        amt = int(amount)
        if amt <= 0:
            return

        if pos in self._amounts:
            self._amounts[pos] += amt
            return

        # Positions arrive in non-decreasing order almost always; search from the tail.
        after = self._tail
        while after is not None and after > pos:
            after = self._prev[after]

        self._amounts[pos] = amt
        if after is None:
            self._prev[pos] = None
            self._next[pos] = self._head
            if self._head is not None:
                self._prev[self._head] = pos
            self._head = pos
            if self._tail is None:
                self._tail = pos
            return

        nxt = self._next[after]
        self._prev[pos] = after
        self._next[pos] = nxt
        self._next[after] = pos
        if nxt is None:
            self._tail = pos
        else:
            self._prev[nxt] = pos

    def decrease(self, position: int, amount: int) -> int:
        """Subtract `amount` from a bucket, unlinking it at zero. Returns what is left."""
        pos = int(position)
        cur = self._amounts[pos]
        amt = int(amount)
        if amt > cur:
            raise ValueError(f"bucket {pos} holds {cur}, cannot take {amt}")
        left = cur - amt
        if left == 0:
            self.remove(pos)
        else:
            self._amounts[pos] = left
        return left

    def remove(self, position: int) -> int:
        """Unlink the bucket at `position` and return its amount."""
        pos = int(position)
        amt = self._amounts.pop(pos)
        prv = self._prev.pop(pos)
        nxt = self._next.pop(pos)
        if prv is None:
            self._head = nxt
        else:
            self._next[prv] = nxt
        if nxt is None:
            self._tail = prv
        else:
            self._prev[nxt] = prv
        return amt

    def shrink(self, cutoff: int) -> int:
        """Drop every bucket with position < cutoff. Returns the removed sum."""
        c = int(cutoff)
        removed = 0
        while self._head is not None and self._head < c:
            removed += self.remove(self._head)
        return removed

    def copy(self) -> "BucketList":
        out = BucketList()
        for pos, amt in self.items():
            out.insert(pos, amt)
        return out


__all__ = ["BucketList", "SENTINEL"]
