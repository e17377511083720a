from __future__ import annotations

from fastapi import APIRouter, Request

from epochledger.api.config import debug_routes_enabled
from epochledger.api.errors import ApiError
from epochledger.api.routes_public_parts.common import _token

router = APIRouter()


@router.get("/state")
def ledger_state(request: Request):
    """Full ledger snapshot. Debug only: never served in prod mode."""
    cfg = getattr(request.app.state, "cfg", None)
    if not debug_routes_enabled(str(getattr(cfg, "mode", "prod"))):
        raise ApiError.not_found("not_found", "state endpoint disabled in prod", {})
    tok = _token(request)
    view = tok.ledger.view(tok.pointer())
    return {"ok": True, "accounts": view.accounts(), "state": view.to_ledger()}
