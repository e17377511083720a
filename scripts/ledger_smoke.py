#!/usr/bin/env python3

"""Smoke test for the epoch ledger API.

It verifies:
  - the app boots from a throwaway config in dev mode
  - mint, transfer and balance queries work over HTTP
  - value minted in an old epoch stops counting once the window moves past it

Usage:
  python3 scripts/ledger_smoke.py

Optional env overrides:
  EPOCHLEDGER_SMOKE_DURATION=10
  EPOCHLEDGER_SMOKE_WINDOW=2
"""

from __future__ import annotations

import json
import os
import tempfile

from fastapi.testclient import TestClient

from epochledger.api.app import create_app


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, str(default)))
    except Exception:
        return int(default)


def main() -> int:
    duration = _env_int("EPOCHLEDGER_SMOKE_DURATION", 10)
    window = _env_int("EPOCHLEDGER_SMOKE_WINDOW", 2)

    with tempfile.TemporaryDirectory(prefix="epochledger-smoke-") as td:
        cfg_path = os.path.join(td, "ledger.json")
        with open(cfg_path, "w", encoding="utf-8") as f:
            json.dump(
                {
                    "ledger_id": "smoke-ledger",
                    "mode": "dev",
                    "bucket_duration": duration,
                    "window_size": window,
                    "pointer_source": "block",
                },
                f,
            )

        os.environ["EPOCHLEDGER_CONFIG_PATH"] = cfg_path
        os.environ["EPOCHLEDGER_MODE"] = "dev"
        os.environ.pop("EPOCHLEDGER_ADMIN_TOKEN", None)

        c = TestClient(create_app(boot_runtime=True))

        r = c.get("/v1/health")
        assert r.status_code == 200, r.text
        assert r.json().get("ready") is True

        r = c.post("/v1/admin/clock", json={"height": 1})
        assert r.status_code == 200, r.text
        r = c.post("/v1/admin/mint", json={"to": "alice", "amount": 100})
        assert r.status_code == 200, r.text

        r = c.post("/v1/transfer", json={"to": "bob", "amount": 40}, headers={"x-epochledger-account": "alice"})
        assert r.status_code == 200, r.text
        assert r.json()["balance"] == "60", r.text

        # move past the end of the window: everything minted at height 1 expires
        r = c.post("/v1/admin/clock", json={"advance": duration * (window + 1)})
        assert r.status_code == 200, r.text

        alice = c.get("/v1/accounts/alice/balance").json()["balance"]
        bob = c.get("/v1/accounts/bob/balance").json()["balance"]
        if alice != "0" or bob != "0":
            raise RuntimeError(f"balances did not expire: alice={alice} bob={bob}")

        print("OK: mint/transfer + expiry", {"pointer": r.json()["pointer"], "epoch": r.json()["epoch"]})
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
