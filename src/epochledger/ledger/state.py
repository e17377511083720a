from __future__ import annotations

from dataclasses import dataclass, field
import copy
from typing import Any, Dict, List, Tuple

from epochledger.ledger.buckets import BucketList


Json = Dict[str, Any]


@dataclass
class EpochAccountState:
    """Balance of one account inside one epoch.

    total_balance always equals the sum of the bucket amounts; both are
    mutated through the helpers below so they never drift apart.
    """

    total_balance: int = 0
    buckets: BucketList = field(default_factory=BucketList)

    def credit(self, position: int, amount: int) -> None:
        self.buckets.insert(position, amount)
        self.total_balance += int(amount)

    def debit(self, position: int, amount: int) -> int:
        left = self.buckets.decrease(position, amount)
        self.total_balance -= int(amount)
        return left

    def evict_before(self, cutoff: int) -> int:
        removed = self.buckets.shrink(cutoff)
        self.total_balance -= removed
        return removed

    def is_empty(self) -> bool:
        return self.total_balance == 0 and self.buckets.is_empty()

    def to_dict(self) -> Json:
        return {
            "total_balance": int(self.total_balance),
            "buckets": [[int(p), int(a)] for p, a in self.buckets.items()],
        }


@dataclass(frozen=True, slots=True)
class LedgerView:
    """
    Immutable read-only ledger snapshot used by the API and by tests.

    Built from ExpiringLedger.snapshot(); never shares structure with the live ledger.
    """

    window: Dict[str, Any] = field(default_factory=dict)
    epochs: Dict[str, Any] = field(default_factory=dict)
    world_state: Dict[str, int] = field(default_factory=dict)
    allowances: Dict[str, Any] = field(default_factory=dict)
    pointer: int = 0

    @classmethod
    def from_ledger(cls, state: Dict[str, Any]) -> "LedgerView":
        return cls(
            window=copy.deepcopy(state.get("window", {})),
            epochs=copy.deepcopy(state.get("epochs", {})),
            world_state=copy.deepcopy(state.get("world_state", {})),
            allowances=copy.deepcopy(state.get("allowances", {})),
            pointer=int(state.get("pointer", 0) or 0),
        )

    def to_ledger(self) -> Dict[str, Any]:
        return {
            "window": copy.deepcopy(self.window),
            "epochs": copy.deepcopy(self.epochs),
            "world_state": copy.deepcopy(self.world_state),
            "allowances": copy.deepcopy(self.allowances),
            "pointer": int(self.pointer),
        }

    def accounts(self) -> List[str]:
        seen = set()
        for by_account in self.epochs.values():
            if isinstance(by_account, dict):
                seen.update(by_account.keys())
        return sorted(seen)

    def get_epoch_state(self, epoch: int, account: str) -> Json:
        by_account = self.epochs.get(str(int(epoch)))
        if not isinstance(by_account, dict):
            return {"total_balance": 0, "buckets": []}
        rec = by_account.get(account)
        return rec if isinstance(rec, dict) else {"total_balance": 0, "buckets": []}

    def buckets(self, epoch: int, account: str) -> List[Tuple[int, int]]:
        rec = self.get_epoch_state(epoch, account)
        out: List[Tuple[int, int]] = []
        for item in rec.get("buckets") or []:
            try:
                out.append((int(item[0]), int(item[1])))
            except Exception:
                continue
        return out

    def get_allowance(self, owner: str, spender: str) -> int:
        by_owner = self.allowances.get(owner)
        if not isinstance(by_owner, dict):
            return 0
        try:
            return int(by_owner.get(spender, 0))
        except Exception:
            return 0
