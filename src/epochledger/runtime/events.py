"""Ledger notifications.

Every successful state transition produces one LedgerEvent. The ledger fans
events out to subscribers after the mutation has completed, so a listener
never sees a half-applied transfer and a failing listener cannot roll one back.
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Callable, Deque, Dict, List, Optional

Json = Dict[str, Any]

KIND_MINT = "mint"
KIND_BURN = "burn"
KIND_TRANSFER = "transfer"
KIND_APPROVAL = "approval"


@dataclass(frozen=True, slots=True)
class LedgerEvent:
    kind: str
    sender: str
    receiver: str
    amount: int
    pointer: int
    epoch: int
    # Set for epoch-pinned spends only.
    pinned_epoch: Optional[int] = None
    seq: int = 0

    def to_dict(self) -> Json:
        d = asdict(self)
        d["from"] = d.pop("sender")
        d["to"] = d.pop("receiver")
        return d


Listener = Callable[[LedgerEvent], None]


class EventJournal:
    """Bounded in-memory tail of recent events, in commit (seq) order.

    Listeners run after the ledger lock is released, so concurrent writers can
    deliver events slightly out of order; recent() reorders by seq.
    """

    def __init__(self, maxlen: int = 1000) -> None:
        self._lock = threading.Lock()
        self._items: Deque[LedgerEvent] = deque(maxlen=max(1, int(maxlen)))

    def __call__(self, event: LedgerEvent) -> None:
        with self._lock:
            self._items.append(event)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def recent(self, limit: int = 100, *, account: Optional[str] = None) -> List[LedgerEvent]:
        with self._lock:
            items = sorted(self._items, key=lambda e: e.seq)
        if account:
            items = [e for e in items if e.sender == account or e.receiver == account]
        lim = max(0, int(limit))
        return items[-lim:] if lim else []


__all__ = [
    "EventJournal",
    "KIND_APPROVAL",
    "KIND_BURN",
    "KIND_MINT",
    "KIND_TRANSFER",
    "LedgerEvent",
    "Listener",
]
