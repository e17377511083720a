from __future__ import annotations

import json

import pytest

from epochledger.ledger.constants import MAX_ALLOWANCE, ZERO_ACCOUNT
from epochledger.runtime.clock import BlockClock
from epochledger.runtime.errors import (
    InsufficientAllowance,
    InsufficientBalance,
    InvalidApprover,
    InvalidReceiver,
    InvalidSender,
    InvalidSpender,
    TransferredExpiredToken,
)
from epochledger.runtime.ledger import ExpiringLedger
from epochledger.runtime.token import ExpiringToken

ALICE = "alice"
BOB = "bob"
CAROL = "carol"


def _token(height: int = 0) -> tuple[ExpiringToken, BlockClock]:
    clock = BlockClock(height)
    tok = ExpiringToken(ledger=ExpiringLedger(bucket_duration=10, window_size=2), pointer_source=clock)
    return tok, clock


def _dump(tok: ExpiringToken) -> str:
    return json.dumps(tok.ledger.snapshot(), sort_keys=True)


def test_balance_follows_clock() -> None:
    tok, clock = _token(5)
    tok.mint(ALICE, 100)
    clock.set(25)
    tok.mint(ALICE, 50)
    assert tok.balance_of(ALICE) == 150
    assert tok.current_epoch() == 2
    assert tok.valid_epoch_range() == (0, 2)

    clock.set(35)
    assert tok.balance_of(ALICE) == 50
    assert tok.is_epoch_expired(0) is True
    assert tok.is_epoch_expired(1) is False
    assert tok.total_supply() == 50


def test_transfer_from_spends_allowance() -> None:
    tok, _ = _token(3)
    tok.mint(ALICE, 100)
    tok.approve(ALICE, BOB, 60)

    assert tok.transfer_from(BOB, ALICE, CAROL, 25) is True
    assert tok.allowance(ALICE, BOB) == 35
    assert tok.balance_of(CAROL) == 25
    assert tok.balance_of(ALICE) == 75


def test_infinite_allowance_is_not_decremented() -> None:
    tok, _ = _token(3)
    tok.mint(ALICE, 100)
    tok.approve(ALICE, BOB, MAX_ALLOWANCE)

    tok.transfer_from(BOB, ALICE, CAROL, 40)
    assert tok.allowance(ALICE, BOB) == MAX_ALLOWANCE


def test_insufficient_allowance_changes_nothing() -> None:
    tok, _ = _token(3)
    tok.mint(ALICE, 100)
    tok.approve(ALICE, BOB, 10)
    before = _dump(tok)

    with pytest.raises(InsufficientAllowance) as e:
        tok.transfer_from(BOB, ALICE, CAROL, 11)

    assert e.value.details == {"spender": BOB, "allowance": 10, "requested": 11}
    assert _dump(tok) == before


def test_allowance_kept_when_balance_is_short() -> None:
    tok, _ = _token(3)
    tok.mint(ALICE, 5)
    tok.approve(ALICE, BOB, 50)

    with pytest.raises(InsufficientBalance):
        tok.transfer_from(BOB, ALICE, CAROL, 6)
    assert tok.allowance(ALICE, BOB) == 50


def test_approve_overwrites_and_zero_clears() -> None:
    tok, _ = _token()
    tok.approve(ALICE, BOB, 10)
    tok.approve(ALICE, BOB, 3)
    assert tok.allowance(ALICE, BOB) == 3
    tok.approve(ALICE, BOB, 0)
    assert tok.allowance(ALICE, BOB) == 0
    assert tok.ledger.snapshot()["allowances"] == {}


def test_transfer_from_at_epoch() -> None:
    tok, clock = _token(5)
    tok.mint(ALICE, 100)
    clock.set(15)
    tok.mint(ALICE, 40)
    tok.approve(ALICE, BOB, 30)

    tok.transfer_from_at_epoch(BOB, 1, ALICE, CAROL, 30)
    assert tok.token_list(CAROL, 1) == [(15, 30)]
    assert tok.allowance(ALICE, BOB) == 0

    clock.set(35)
    tok.approve(ALICE, BOB, 5)
    with pytest.raises(TransferredExpiredToken):
        tok.transfer_from_at_epoch(BOB, 0, ALICE, CAROL, 1)
    assert tok.allowance(ALICE, BOB) == 5


def test_burn_and_burn_at_epoch() -> None:
    tok, clock = _token(5)
    tok.mint(ALICE, 100)
    clock.set(15)
    tok.mint(ALICE, 40)

    tok.burn(ALICE, 30)
    assert tok.balance_of_at_epoch(0, ALICE) == 70
    tok.burn_at_epoch(ALICE, 1, 10)
    assert tok.balance_of_at_epoch(1, ALICE) == 30
    assert tok.total_supply() == 100


@pytest.mark.parametrize("bad", [None, "", "  ", ZERO_ACCOUNT])
def test_null_participants_are_rejected(bad) -> None:
    tok, _ = _token(1)
    tok.mint(ALICE, 10)

    with pytest.raises(InvalidSender):
        tok.transfer(bad, BOB, 1)
    with pytest.raises(InvalidReceiver):
        tok.transfer(ALICE, bad, 1)
    with pytest.raises(InvalidReceiver):
        tok.mint(bad, 1)
    with pytest.raises(InvalidSender):
        tok.burn(bad, 1)
    with pytest.raises(InvalidApprover):
        tok.approve(bad, BOB, 1)
    with pytest.raises(InvalidSpender):
        tok.approve(ALICE, bad, 1)
    with pytest.raises(InvalidSpender):
        tok.transfer_from(bad, ALICE, BOB, 1)


def test_describe() -> None:
    tok, _ = _token(25)
    tok.mint(ALICE, 9)
    d = tok.describe()
    assert d["symbol"] == "XPT"
    assert d["decimals"] == 18
    assert d["epoch_length"] == 10
    assert d["validity_duration"] == 2
    assert d["current_epoch"] == 2
    assert d["first_valid_epoch"] == 0
    assert d["total_supply"] == 9
    assert d["expiry_mode"] == "epoch"
