from __future__ import annotations

import threading

from epochledger.ledger.constants import ZERO_ACCOUNT
from epochledger.runtime.errors import InsufficientBalance
from epochledger.runtime.ledger import ExpiringLedger


def test_concurrent_transfers_conserve_value() -> None:
    led = ExpiringLedger(bucket_duration=100, window_size=4)
    accounts = [f"acct{i}" for i in range(6)]
    for i, a in enumerate(accounts):
        led.update(i + 1, ZERO_ACCOUNT, a, 1_000)

    errors: list[BaseException] = []

    def _worker(idx: int) -> None:
        src = accounts[idx]
        dst = accounts[(idx + 1) % len(accounts)]
        try:
            for n in range(200):
                try:
                    led.update(10 + n, src, dst, 7)
                except InsufficientBalance:
                    pass
        except BaseException as e:  # pragma: no cover
            errors.append(e)

    threads = [threading.Thread(target=_worker, args=(i,)) for i in range(len(accounts))]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert sum(led.balance_of(a, 300) for a in accounts) == 6_000
    assert led.total_supply(300) == 6_000


def test_concurrent_spenders_never_overdraw() -> None:
    led = ExpiringLedger(bucket_duration=100, window_size=4)
    led.update(1, ZERO_ACCOUNT, "pool", 100)

    ok: list[int] = []
    lock = threading.Lock()

    def _spend(i: int) -> None:
        try:
            led.update(2, "pool", f"taker{i}", 30)
        except InsufficientBalance:
            return
        with lock:
            ok.append(i)

    threads = [threading.Thread(target=_spend, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(ok) == 3
    assert led.balance_of("pool", 2) == 10
