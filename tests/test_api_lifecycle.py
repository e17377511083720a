from __future__ import annotations

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient


class _FakeToken(SimpleNamespace):
    """Minimal token stub for API lifecycle tests."""


def test_create_app_boot_runtime_false_does_not_attach_token() -> None:
    from epochledger.api.app import create_app

    app = create_app(boot_runtime=False)
    assert getattr(app.state, "token", None) is None
    assert getattr(app.state, "journal", None) is None

    with TestClient(app) as client:
        r = client.get("/v1/health")
        assert r.status_code == 200
        assert r.json()["ready"] is False

        r = client.get("/v1/token")
        assert r.status_code == 500
        assert r.json()["error"]["code"] == "not_ready"

        # no journal attached: empty tail rather than an error
        assert client.get("/v1/events").json() == {"ok": True, "events": []}


def test_create_app_boot_runtime_true_attaches_token(monkeypatch: pytest.MonkeyPatch) -> None:
    from epochledger.api import app as api_app

    def _fake_build_token():
        return _FakeToken(meta={"ledger_id": "epochledger-test"})

    monkeypatch.setattr(api_app, "build_token", _fake_build_token)

    app = api_app.create_app(boot_runtime=True)
    assert getattr(app.state, "token", None) is not None
    assert app.state.journal is not None

    with TestClient(app) as client:
        r = client.get("/v1/health")
        assert r.json()["ready"] is True
        assert r.json()["ledger_id"] == "epochledger-test"


def test_prod_mode_hides_docs(monkeypatch: pytest.MonkeyPatch) -> None:
    from epochledger.api.app import create_app

    monkeypatch.setenv("EPOCHLEDGER_MODE", "prod")
    with TestClient(create_app(boot_runtime=False)) as client:
        assert client.get("/docs").status_code == 404

    monkeypatch.setenv("EPOCHLEDGER_MODE", "dev")
    with TestClient(create_app(boot_runtime=False)) as client:
        assert client.get("/docs").status_code == 200


def test_request_id_is_echoed(monkeypatch: pytest.MonkeyPatch) -> None:
    from epochledger.api.app import create_app

    monkeypatch.delenv("EPOCHLEDGER_LOG_REQUESTS", raising=False)
    with TestClient(create_app(boot_runtime=False)) as client:
        r = client.get("/v1/health", headers={"x-request-id": "req-123"})
        assert r.headers["x-request-id"] == "req-123"
        assert client.get("/v1/health").headers.get("x-request-id")
