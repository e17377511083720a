from __future__ import annotations

import json

import pytest

from epochledger.ledger.constants import ZERO_ACCOUNT
from epochledger.runtime.errors import InsufficientBalance, TransferredExpiredToken
from epochledger.runtime.ledger import ExpiringLedger

ALICE = "alice"
BOB = "bob"


def _funded() -> ExpiringLedger:
    led = ExpiringLedger(bucket_duration=10, window_size=2)
    led.update(5, ZERO_ACCOUNT, ALICE, 100)
    led.update(15, ZERO_ACCOUNT, ALICE, 40)
    led.update(25, ZERO_ACCOUNT, ALICE, 50)
    return led


def test_pinned_transfer_spends_only_that_epoch() -> None:
    led = _funded()
    ev = led.update_at_epoch(25, 2, ALICE, BOB, 30)

    assert ev.pinned_epoch == 2
    assert led.token_list(ALICE, 0) == [(5, 100)]
    assert led.token_list(ALICE, 2) == [(25, 20)]
    assert led.token_list(BOB, 2) == [(25, 30)]


def test_pinned_transfer_of_expired_epoch_fails() -> None:
    led = _funded()
    before = json.dumps(led.snapshot(), sort_keys=True)

    with pytest.raises(TransferredExpiredToken) as e:
        led.update_at_epoch(35, 0, ALICE, BOB, 1)

    assert e.value.details == {"epoch": 0, "first_valid_epoch": 1}
    assert json.dumps(led.snapshot(), sort_keys=True) == before


def test_pinned_transfer_of_future_epoch_has_nothing_to_spend() -> None:
    led = _funded()
    with pytest.raises(InsufficientBalance) as e:
        led.update_at_epoch(25, 5, ALICE, BOB, 1)
    assert e.value.available == 0


def test_pinned_transfer_is_limited_to_epoch_balance() -> None:
    led = _funded()
    with pytest.raises(InsufficientBalance) as e:
        led.update_at_epoch(25, 1, ALICE, BOB, 41)
    assert e.value.available == 40


def test_pinned_burn_updates_world_state() -> None:
    led = _funded()
    led.update_at_epoch(25, 1, ALICE, ZERO_ACCOUNT, 15)
    assert led.world_balance(15) == 25
    assert led.balance_of_at_epoch(1, ALICE, 25) == 25
    assert led.total_supply(25) == 175


def test_pinned_mint_is_plain_mint() -> None:
    led = ExpiringLedger(bucket_duration=10, window_size=2)
    ev = led.update_at_epoch(12, 7, ZERO_ACCOUNT, ALICE, 5)
    assert ev.kind == "mint"
    assert led.token_list(ALICE, 1) == [(12, 5)]
