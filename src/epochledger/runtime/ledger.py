"""Expiring balance ledger.

State:
  states[(epoch, account)] -> EpochAccountState   (flat composite-key map)
  world_state[position]    -> minted minus burned at that position (expired
                              positions are dropped on the next write)
  allowances[(owner, spender)] -> amount

Every public method runs under one re-entrant lock, so a spend that walks
several epochs is applied completely or not at all and readers never see it
half done. A spend computes the available balance with the read-only query
engine before it touches anything; a rejected spend leaves the state exactly
as it was, including buckets that refresh would otherwise have evicted.

Mint, burn and transfer are the same operation:
  update(pointer, ZERO_ACCOUNT, to, amount)   -> mint
  update(pointer, sender, ZERO_ACCOUNT, amount) -> burn
  update(pointer, sender, receiver, amount)   -> transfer
"""

from __future__ import annotations

import bisect
import threading
from typing import Any, Dict, List, Optional, Tuple

from epochledger.ledger.constants import EXPIRY_MODE_EPOCH, ZERO_ACCOUNT
from epochledger.ledger.state import EpochAccountState, LedgerView
from epochledger.ledger.window import SlidingWindow
from epochledger.runtime import balances
from epochledger.runtime.errors import (
    InsufficientBalance,
    InvalidAmount,
    InvalidReceiver,
    TransferredExpiredToken,
)
from epochledger.runtime.events import (
    KIND_APPROVAL,
    KIND_BURN,
    KIND_MINT,
    KIND_TRANSFER,
    LedgerEvent,
    Listener,
)
from epochledger.runtime.ledger_logging import get_logger, log_event, log_ledger_event
from epochledger.runtime.metrics import inc_counter

Json = Dict[str, Any]

_log = get_logger("ledger")


def _as_amount(v: Any) -> int:
    # bool is an int subclass; disallow it explicitly
    if isinstance(v, bool) or not isinstance(v, int) or v < 0:
        raise InvalidAmount(v)
    return int(v)


def _event_kind(sender: str, receiver: str) -> str:
    if sender == ZERO_ACCOUNT:
        return KIND_MINT
    if receiver == ZERO_ACCOUNT:
        return KIND_BURN
    return KIND_TRANSFER


class ExpiringLedger:
    def __init__(
        self,
        *,
        origin_position: int = 0,
        bucket_duration: int,
        window_size: int,
        strict: bool = True,
        expiry_mode: str = EXPIRY_MODE_EPOCH,
    ) -> None:
        self._lock = threading.RLock()
        self.window = SlidingWindow()
        self.window.set_expiry_mode(expiry_mode)
        self.window.setup(origin_position, bucket_duration, window_size, strict)

        self._states: Dict[Tuple[int, str], EpochAccountState] = {}
        self._account_epochs: Dict[str, List[int]] = {}
        self._world: Dict[int, int] = {}
        # world positions in ascending order; expired ones are pruned from the front
        self._world_positions: List[int] = []
        self._allowances: Dict[Tuple[str, str], int] = {}

        self._listeners: List[Listener] = []
        self._seq = 0

    def locked(self) -> "threading.RLock":
        """The single-writer lock, for callers composing several calls into one step."""
        return self._lock

    # ------------------------------------------------------------------
    # notifications
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _next_event(self, kind: str, sender: str, receiver: str, amount: int, pointer: int, pinned: Optional[int]) -> LedgerEvent:
        self._seq += 1
        return LedgerEvent(
            kind=kind,
            sender=sender,
            receiver=receiver,
            amount=int(amount),
            pointer=int(pointer),
            epoch=self.window.index_for(pointer),
            pinned_epoch=pinned,
            seq=self._seq,
        )

    def _emit(self, event: LedgerEvent) -> None:
        log_ledger_event(_log, event)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # The transition is already committed; a listener can't undo it.
                _log.exception("ledger listener failed: seq=%s kind=%s", event.seq, event.kind)

    # ------------------------------------------------------------------
    # state helpers (caller holds the lock)
    # ------------------------------------------------------------------

    def _get_or_create(self, epoch: int, account: str) -> EpochAccountState:
        key = (epoch, account)
        st = self._states.get(key)
        if st is None:
            st = EpochAccountState()
            self._states[key] = st
            bisect.insort(self._account_epochs.setdefault(account, []), epoch)
        return st

    def _drop(self, epoch: int, account: str) -> None:
        if self._states.pop((epoch, account), None) is None:
            return
        eps = self._account_epochs.get(account)
        if not eps:
            return
        i = bisect.bisect_left(eps, epoch)
        if i < len(eps) and eps[i] == epoch:
            eps.pop(i)
        if not eps:
            del self._account_epochs[account]

    def _world_add(self, position: int, amount: int) -> None:
        if position not in self._world:
            bisect.insort(self._world_positions, position)
        self._world[position] = self._world.get(position, 0) + amount

    def _world_sub(self, position: int, amount: int) -> None:
        left = self._world.get(position, 0) - amount
        if left > 0:
            self._world[position] = left
            return
        if self._world.pop(position, None) is None:
            return
        i = bisect.bisect_left(self._world_positions, position)
        if i < len(self._world_positions) and self._world_positions[i] == position:
            self._world_positions.pop(i)

    def _prune_world(self, pointer: int) -> int:
        """Forget world positions that have expired at `pointer`.

        Pointers never rewind and expiry is monotone in position, so the
        expired positions are always a prefix of the sorted list.
        """
        n = 0
        for position in self._world_positions:
            if not self.window.is_expired(position, pointer):
                break
            n += 1
        if n:
            for position in self._world_positions[:n]:
                del self._world[position]
            del self._world_positions[:n]
            inc_counter("ledger_world_pruned_total", n)
        return n

    def _refresh(self, account: str, epoch: int, pointer: int) -> int:
        st = self._states.get((epoch, account))
        if st is None:
            return 0
        cutoff = None
        for position, _ in st.buckets.items():
            if not self.window.is_expired(position, pointer):
                cutoff = position
                break
        if cutoff is None:
            # everything in the epoch has expired
            cutoff = st.buckets.back() + 1
        evicted = st.evict_before(cutoff)
        if st.is_empty():
            self._drop(epoch, account)
        return evicted

    def _evict_stale_epochs(self, account: str, first: int) -> int:
        eps = self._account_epochs.get(account)
        if not eps or eps[0] >= first:
            return 0
        stale = eps[: bisect.bisect_left(eps, first)]
        evicted = 0
        for epoch in stale:
            evicted += self._states[(epoch, account)].total_balance
            self._drop(epoch, account)
        return evicted

    # ------------------------------------------------------------------
    # eviction
    # ------------------------------------------------------------------

    def refresh(self, account: str, epoch: int, pointer: int) -> int:
        """Physically drop expired buckets of (account, epoch). Returns the evicted amount."""
        with self._lock:
            evicted = self._refresh(account, int(epoch), int(pointer))
        if evicted:
            inc_counter("ledger_evicted_amount_total", evicted, source="refresh")
        return evicted

    # ------------------------------------------------------------------
    # state transitions
    # ------------------------------------------------------------------

    def update(self, pointer: int, sender: str, receiver: str, amount: int) -> LedgerEvent:
        """Mint, burn or transfer across the whole valid window, oldest value first."""
        p = int(pointer)
        amt = _as_amount(amount)
        if sender == ZERO_ACCOUNT and receiver == ZERO_ACCOUNT:
            raise InvalidReceiver(receiver)

        with self._lock:
            if sender == ZERO_ACCOUNT:
                self._mint(p, receiver, amt)
            else:
                first, last = self.window.index_range(p)
                self._spend(p, sender, receiver, amt, first, last)
            self._prune_world(p)
            event = self._next_event(_event_kind(sender, receiver), sender, receiver, amt, p, None)

        inc_counter("ledger_events_total", kind=event.kind)
        self._emit(event)
        return event

    def update_at_epoch(self, pointer: int, epoch: int, sender: str, receiver: str, amount: int) -> LedgerEvent:
        """Burn or transfer using only the value minted in `epoch`."""
        p = int(pointer)
        e = int(epoch)
        amt = _as_amount(amount)
        if sender == ZERO_ACCOUNT:
            # minting is not epoch-addressable: value is always stamped with the pointer
            return self.update(p, sender, receiver, amt)

        with self._lock:
            first, _ = self.window.index_range(p)
            if e < first:
                inc_counter("ledger_rejected_total", reason="transferred_expired_token")
                raise TransferredExpiredToken(e, first)
            self._spend(p, sender, receiver, amt, e, e)
            self._prune_world(p)
            event = self._next_event(_event_kind(sender, receiver), sender, receiver, amt, p, e)

        inc_counter("ledger_events_total", kind=event.kind)
        self._emit(event)
        return event

    def _mint(self, pointer: int, receiver: str, amount: int) -> None:
        if amount == 0:
            return
        epoch = self.window.index_for(pointer)
        self._get_or_create(epoch, receiver).credit(pointer, amount)
        self._world_add(pointer, amount)

    def _spend(self, pointer: int, sender: str, receiver: str, amount: int, first: int, last: int) -> None:
        """Consume `amount` from sender's buckets in epochs first..last, oldest first."""
        available = balances.balance_over_range(self._states, self.window, sender, first, last, pointer)
        if available < amount:
            inc_counter("ledger_rejected_total", reason="insufficient_balance")
            raise InsufficientBalance(sender, available, amount)

        window_first, _ = self.window.index_range(pointer)
        evicted = self._refresh(sender, window_first, pointer)
        evicted += self._evict_stale_epochs(sender, window_first)
        if evicted:
            inc_counter("ledger_evicted_amount_total", evicted, source="spend")

        if amount == 0 or sender == receiver:
            return

        burn = receiver == ZERO_ACCOUNT
        remaining = amount
        for epoch in range(first, last + 1):
            if remaining == 0:
                break
            st = self._states.get((epoch, sender))
            if st is None:
                continue
            while remaining > 0 and not st.buckets.is_empty():
                position = st.buckets.front()
                held = st.buckets.amount_of(position)
                take = held if held <= remaining else remaining
                st.debit(position, take)
                remaining -= take
                if burn:
                    self._world_sub(position, take)
                else:
                    self._get_or_create(epoch, receiver).credit(position, take)
            if st.is_empty():
                self._drop(epoch, sender)

        if remaining:
            # available was computed from these buckets under the same lock
            raise RuntimeError(f"bucket walk left {remaining} unconsumed for {sender}")

    # ------------------------------------------------------------------
    # allowances
    # ------------------------------------------------------------------

    def allowance(self, owner: str, spender: str) -> int:
        with self._lock:
            return int(self._allowances.get((owner, spender), 0))

    def set_allowance(self, owner: str, spender: str, amount: int, *, pointer: int = 0) -> LedgerEvent:
        amt = _as_amount(amount)
        with self._lock:
            if amt == 0:
                self._allowances.pop((owner, spender), None)
            else:
                self._allowances[(owner, spender)] = amt
            event = self._next_event(KIND_APPROVAL, owner, spender, amt, pointer, None)
        self._emit(event)
        return event

    def decrease_allowance(self, owner: str, spender: str, amount: int) -> int:
        """Lower an allowance without emitting an approval (transferFrom bookkeeping)."""
        amt = _as_amount(amount)
        with self._lock:
            cur = int(self._allowances.get((owner, spender), 0))
            left = max(0, cur - amt)
            if left == 0:
                self._allowances.pop((owner, spender), None)
            else:
                self._allowances[(owner, spender)] = left
            return left

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def balance_of(self, account: str, pointer: int) -> int:
        with self._lock:
            return balances.balance_of(self._states, self.window, account, int(pointer))

    def balance_of_at_epoch(self, epoch: int, account: str, pointer: int) -> int:
        with self._lock:
            return balances.balance_of_at_epoch(self._states, self.window, int(epoch), account, int(pointer))

    def token_list(self, account: str, epoch: int) -> List[Tuple[int, int]]:
        """Buckets held by account in epoch as (position, amount), oldest first."""
        with self._lock:
            st = self._states.get((int(epoch), account))
            return list(st.buckets.items()) if st is not None else []

    def epochs_of(self, account: str) -> List[int]:
        """Epochs in which account still has physical state (expired ones included)."""
        with self._lock:
            return list(self._account_epochs.get(account, []))

    def world_balance(self, position: int) -> int:
        with self._lock:
            return int(self._world.get(int(position), 0))

    def total_supply(self, pointer: int) -> int:
        """Minted minus burned over positions that have not expired at `pointer`."""
        p = int(pointer)
        with self._lock:
            return sum(self._world[pos] for pos in self._world_positions if not self.window.is_expired(pos, p))

    def gauges(self, pointer: int) -> Dict[str, int]:
        """Point-in-time state figures for the metrics endpoint."""
        p = int(pointer)
        with self._lock:
            return {
                "ledger_total_supply": self.total_supply(p),
                "ledger_current_epoch": self.window.index_for(p),
                "ledger_world_positions": len(self._world_positions),
                "ledger_epoch_states": len(self._states),
                "ledger_accounts": len(self._account_epochs),
            }

    # ------------------------------------------------------------------
    # administration
    # ------------------------------------------------------------------

    def reset_window(self, origin_position: int, bucket_duration: int, window_size: int, strict: bool = True) -> None:
        """Replace the window parameters. Destroys every bucket and the world state."""
        with self._lock:
            fresh = SlidingWindow(expiry_mode=self.window.expiry_mode)
            fresh.setup(origin_position, bucket_duration, window_size, strict)
            self.window = fresh
            self._states.clear()
            self._account_epochs.clear()
            self._world.clear()
            self._world_positions.clear()
        log_event(_log, "ledger_window_reset", **fresh.as_dict())

    def snapshot(self, pointer: Optional[int] = None) -> Json:
        """Deterministic JSON-able copy of the whole ledger."""
        with self._lock:
            epochs: Json = {}
            for epoch, account in sorted(self._states.keys()):
                epochs.setdefault(str(epoch), {})[account] = self._states[(epoch, account)].to_dict()
            allowances: Json = {}
            for owner, spender in sorted(self._allowances.keys()):
                allowances.setdefault(owner, {})[spender] = int(self._allowances[(owner, spender)])
            return {
                "window": self.window.as_dict(),
                "epochs": epochs,
                "world_state": {str(p): int(self._world[p]) for p in sorted(self._world.keys())},
                "allowances": allowances,
                "pointer": int(pointer) if pointer is not None else 0,
            }

    def view(self, pointer: Optional[int] = None) -> LedgerView:
        """Immutable copy of the ledger for readers outside the lock."""
        return LedgerView.from_ledger(self.snapshot(pointer))
