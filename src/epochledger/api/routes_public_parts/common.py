from __future__ import annotations

import hmac
from typing import Any, Dict

from fastapi import Request

from epochledger.api.config import admin_open_without_token
from epochledger.api.errors import ApiError
from epochledger.runtime.token import ExpiringToken

Json = Dict[str, Any]

ACCOUNT_HEADER = "x-epochledger-account"
ADMIN_HEADER = "x-epochledger-admin-token"


def _token(request: Request) -> ExpiringToken:
    tok = getattr(request.app.state, "token", None)
    if tok is None:
        raise ApiError.internal("not_ready", "token not attached to app.state", {})
    return tok


def _caller(request: Request) -> str:
    """The account acting in this request.

    Identity is asserted by the gateway in front of this service; the ledger
    does not authenticate callers itself.
    """
    acct = (request.headers.get(ACCOUNT_HEADER) or "").strip()
    if not acct:
        raise ApiError.bad_request("caller_missing", f"{ACCOUNT_HEADER} header is required", {})
    return acct


def _require_admin(request: Request) -> None:
    cfg = getattr(request.app.state, "cfg", None)
    mode = str(getattr(cfg, "mode", "prod") or "prod")
    expected = getattr(cfg, "admin_token", None)

    if not expected:
        if admin_open_without_token(mode):
            return
        raise ApiError.forbidden("admin_disabled", "admin routes require EPOCHLEDGER_ADMIN_TOKEN", {"mode": mode})

    got = (request.headers.get(ADMIN_HEADER) or "").strip()
    if not got or not hmac.compare_digest(got.encode("utf-8"), str(expected).encode("utf-8")):
        raise ApiError.forbidden("admin_forbidden", "invalid admin token", {})


def _amount(v: int) -> str:
    return str(int(v))


def _int_param(v: Any, default: int) -> int:
    """Parse an int-ish query param safely."""
    if v is None:
        return int(default)
    try:
        s = str(v).strip()
        if s == "":
            return int(default)
        return int(s)
    except Exception:
        return int(default)
