from __future__ import annotations

import os

from fastapi import FastAPI

from epochledger.api.config import load_api_config
from epochledger.api.errors import install_error_handlers
from epochledger.api.routes_public import public_router
from epochledger.api.structured_logging import RequestLogMiddleware, configure_structured_logging
from epochledger.runtime.events import EventJournal
from epochledger.runtime.ledger_boot import build_token as _build_token


def build_token():
    """Build the ExpiringToken served by the API.

    This wrapper exists so tests can monkeypatch `epochledger.api.app.build_token`
    without reaching into runtime modules.
    """
    return _build_token()


def _journal_size() -> int:
    try:
        return max(1, int(os.environ.get("EPOCHLEDGER_EVENT_JOURNAL_SIZE", "1000")))
    except Exception:
        return 1000


def create_app(*, boot_runtime: bool = True) -> FastAPI:
    """Create the FastAPI application.

    boot_runtime:
      - True (default): load ledger config, build the token, attach an event journal
      - False: no token attached; routes that need it answer 500 not_ready
    """
    configure_structured_logging()
    cfg = load_api_config()

    # Disable docs in production.
    if cfg.mode == "prod":
        app = FastAPI(title="Epoch Ledger API", docs_url=None, redoc_url=None, openapi_url=None)
    else:
        app = FastAPI(title="Epoch Ledger API")

    app.state.cfg = cfg
    app.state.token = None
    app.state.journal = None

    if boot_runtime:
        tok = build_token()
        journal = EventJournal(maxlen=_journal_size())
        subscribe = getattr(getattr(tok, "ledger", None), "subscribe", None)
        if callable(subscribe):
            subscribe(journal)
        app.state.token = tok
        app.state.journal = journal

    app.add_middleware(RequestLogMiddleware)
    install_error_handlers(app)
    app.include_router(public_router)

    return app
