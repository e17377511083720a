from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

Json = Dict[str, Any]


@dataclass
class LedgerError(Exception):
    """Canonical error type for window setup and ledger state transitions.

    A raised LedgerError always means the ledger state is unchanged.
    """

    code: str
    reason: str
    details: Any | None = None

    def __str__(self) -> str:  # pragma: no cover
        if self.details is None:
            return f"{self.code}:{self.reason}"
        return f"{self.code}:{self.reason}:{self.details}"


# ---- configuration errors ----


class InvalidDuration(LedgerError):
    def __init__(self, duration: int) -> None:
        super().__init__("invalid_config", "invalid_duration", {"duration": int(duration)})


class InvalidSize(LedgerError):
    def __init__(self, size: int) -> None:
        super().__init__("invalid_config", "invalid_size", {"size": int(size)})


class WindowAlreadyConfigured(LedgerError):
    def __init__(self) -> None:
        super().__init__("invalid_state", "window_already_configured", None)


# ---- balance errors ----


class InsufficientBalance(LedgerError):
    def __init__(self, account: str, available: int, requested: int) -> None:
        super().__init__(
            "insufficient_balance",
            "insufficient_balance",
            {"account": account, "available": int(available), "requested": int(requested)},
        )

    @property
    def account(self) -> str:
        return str(self.details["account"])

    @property
    def available(self) -> int:
        return int(self.details["available"])

    @property
    def requested(self) -> int:
        return int(self.details["requested"])


class TransferredExpiredToken(LedgerError):
    def __init__(self, epoch: int, first_valid_epoch: int) -> None:
        super().__init__(
            "expired",
            "transferred_expired_token",
            {"epoch": int(epoch), "first_valid_epoch": int(first_valid_epoch)},
        )


class InsufficientAllowance(LedgerError):
    def __init__(self, spender: str, allowance: int, requested: int) -> None:
        super().__init__(
            "insufficient_allowance",
            "insufficient_allowance",
            {"spender": spender, "allowance": int(allowance), "requested": int(requested)},
        )


# ---- participant / input errors ----


def _participant(role: str, account: Optional[str]) -> Json:
    return {"role": role, "account": account}


class InvalidSender(LedgerError):
    def __init__(self, account: Optional[str]) -> None:
        super().__init__("invalid_participant", "invalid_sender", _participant("sender", account))


class InvalidReceiver(LedgerError):
    def __init__(self, account: Optional[str]) -> None:
        super().__init__("invalid_participant", "invalid_receiver", _participant("receiver", account))


class InvalidApprover(LedgerError):
    def __init__(self, account: Optional[str]) -> None:
        super().__init__("invalid_participant", "invalid_approver", _participant("approver", account))


class InvalidSpender(LedgerError):
    def __init__(self, account: Optional[str]) -> None:
        super().__init__("invalid_participant", "invalid_spender", _participant("spender", account))


class InvalidAmount(LedgerError):
    def __init__(self, amount: Any) -> None:
        super().__init__("invalid_amount", "amount_must_be_non_negative_int", {"amount": repr(amount)})
