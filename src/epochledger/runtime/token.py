"""ERC-7818 style token facade over ExpiringLedger.

Adds what an application sees: a caller, approvals, token metadata and a
pointer source. Participant checks happen here, before the ledger is touched.
Who may call mint/burn is decided by the surrounding application.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from epochledger.ledger.constants import (
    DEFAULT_DECIMALS,
    DEFAULT_TOKEN_NAME,
    DEFAULT_TOKEN_SYMBOL,
    MAX_ALLOWANCE,
    ZERO_ACCOUNT,
)
from epochledger.runtime.clock import PointerSource
from epochledger.runtime.errors import (
    InsufficientAllowance,
    InvalidApprover,
    InvalidReceiver,
    InvalidSender,
    InvalidSpender,
)
from epochledger.runtime.ledger import ExpiringLedger

Json = Dict[str, Any]


def _is_null(account: Optional[str]) -> bool:
    return account is None or not str(account).strip() or account == ZERO_ACCOUNT


@dataclass
class ExpiringToken:
    ledger: ExpiringLedger
    pointer_source: PointerSource
    name: str = DEFAULT_TOKEN_NAME
    symbol: str = DEFAULT_TOKEN_SYMBOL
    decimals: int = DEFAULT_DECIMALS
    meta: Json = field(default_factory=dict)

    def pointer(self) -> int:
        return int(self.pointer_source())

    # ---- window introspection ----

    def current_epoch(self) -> int:
        return self.ledger.window.index_for(self.pointer())

    def valid_epoch_range(self) -> Tuple[int, int]:
        return self.ledger.window.index_range(self.pointer())

    def epoch_length(self) -> int:
        return int(self.ledger.window.bucket_duration)

    def validity_duration(self) -> int:
        return int(self.ledger.window.window_size)

    def is_epoch_expired(self, epoch: int) -> bool:
        return self.ledger.window.is_epoch_expired(epoch, self.pointer())

    # ---- balances ----

    def balance_of(self, account: str) -> int:
        return self.ledger.balance_of(account, self.pointer())

    def balance_of_at_epoch(self, epoch: int, account: str) -> int:
        return self.ledger.balance_of_at_epoch(epoch, account, self.pointer())

    def token_list(self, account: str, epoch: int) -> List[Tuple[int, int]]:
        return self.ledger.token_list(account, epoch)

    def total_supply(self) -> int:
        return self.ledger.total_supply(self.pointer())

    # ---- transfers ----

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        self._check_parties(sender, to)
        self.ledger.update(self.pointer(), sender, to, amount)
        return True

    def transfer_at_epoch(self, sender: str, epoch: int, to: str, amount: int) -> bool:
        self._check_parties(sender, to)
        self.ledger.update_at_epoch(self.pointer(), epoch, sender, to, amount)
        return True

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        self._check_parties(owner, to)
        with self.ledger.locked():
            self._check_allowance(owner, spender, amount)
            self.ledger.update(self.pointer(), owner, to, amount)
            self._spend_allowance(owner, spender, amount)
        return True

    def transfer_from_at_epoch(self, spender: str, epoch: int, owner: str, to: str, amount: int) -> bool:
        self._check_parties(owner, to)
        with self.ledger.locked():
            self._check_allowance(owner, spender, amount)
            self.ledger.update_at_epoch(self.pointer(), epoch, owner, to, amount)
            self._spend_allowance(owner, spender, amount)
        return True

    # ---- approvals ----

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        if _is_null(owner):
            raise InvalidApprover(owner)
        if _is_null(spender):
            raise InvalidSpender(spender)
        self.ledger.set_allowance(owner, spender, amount, pointer=self.pointer())
        return True

    def allowance(self, owner: str, spender: str) -> int:
        return self.ledger.allowance(owner, spender)

    # ---- administrative ----

    def mint(self, to: str, amount: int) -> bool:
        if _is_null(to):
            raise InvalidReceiver(to)
        self.ledger.update(self.pointer(), ZERO_ACCOUNT, to, amount)
        return True

    def burn(self, owner: str, amount: int) -> bool:
        if _is_null(owner):
            raise InvalidSender(owner)
        self.ledger.update(self.pointer(), owner, ZERO_ACCOUNT, amount)
        return True

    def burn_at_epoch(self, owner: str, epoch: int, amount: int) -> bool:
        if _is_null(owner):
            raise InvalidSender(owner)
        self.ledger.update_at_epoch(self.pointer(), epoch, owner, ZERO_ACCOUNT, amount)
        return True

    # ---- helpers ----

    def _check_parties(self, sender: str, to: str) -> None:
        if _is_null(sender):
            raise InvalidSender(sender)
        if _is_null(to):
            raise InvalidReceiver(to)

    def _check_allowance(self, owner: str, spender: str, amount: int) -> None:
        if _is_null(spender):
            raise InvalidSpender(spender)
        current = self.ledger.allowance(owner, spender)
        if current != MAX_ALLOWANCE and current < int(amount):
            raise InsufficientAllowance(spender, current, int(amount))

    def _spend_allowance(self, owner: str, spender: str, amount: int) -> None:
        if self.ledger.allowance(owner, spender) == MAX_ALLOWANCE:
            return
        self.ledger.decrease_allowance(owner, spender, amount)

    def describe(self) -> Json:
        p = self.pointer()
        first, last = self.ledger.window.index_range(p)
        return {
            "name": self.name,
            "symbol": self.symbol,
            "decimals": int(self.decimals),
            "epoch_length": self.epoch_length(),
            "validity_duration": self.validity_duration(),
            "expiry_mode": self.ledger.window.expiry_mode,
            "pointer": p,
            "current_epoch": last,
            "first_valid_epoch": first,
            "total_supply": self.ledger.total_supply(p),
        }
