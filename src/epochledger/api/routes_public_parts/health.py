from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
def health(request: Request):
    tok = getattr(request.app.state, "token", None)
    cfg = getattr(request.app.state, "cfg", None)
    meta = getattr(tok, "meta", {}) if tok is not None else {}
    return {
        "ok": True,
        "ready": tok is not None,
        "ledger_id": meta.get("ledger_id", ""),
        "mode": getattr(cfg, "mode", ""),
    }
