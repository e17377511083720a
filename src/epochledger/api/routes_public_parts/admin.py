from __future__ import annotations

from fastapi import APIRouter, Request

from epochledger.api.errors import ApiError
from epochledger.api.routes_public_parts.common import _amount, _require_admin, _token
from epochledger.api.schemas import BurnRequest, ClockRequest, MintRequest
from epochledger.runtime.clock import BlockClock

router = APIRouter()


@router.post("/admin/mint")
def admin_mint(body: MintRequest, request: Request):
    _require_admin(request)
    tok = _token(request)
    tok.mint(body.to, body.amount)
    return {
        "ok": True,
        "to": body.to,
        "amount": _amount(body.amount),
        "pointer": tok.pointer(),
        "epoch": tok.current_epoch(),
    }


@router.post("/admin/burn")
def admin_burn(body: BurnRequest, request: Request):
    _require_admin(request)
    tok = _token(request)
    if body.epoch is None:
        tok.burn(body.account, body.amount)
    else:
        tok.burn_at_epoch(body.account, body.epoch, body.amount)
    return {"ok": True, "account": body.account, "amount": _amount(body.amount), "epoch": body.epoch}


@router.post("/admin/clock")
def admin_clock(body: ClockRequest, request: Request):
    """Advance the block pointer. Only meaningful with pointer_source=block."""
    _require_admin(request)
    tok = _token(request)
    clock = tok.pointer_source
    if not isinstance(clock, BlockClock):
        raise ApiError.bad_request("clock_not_settable", "pointer source is not a block clock", {})
    try:
        if body.height is not None:
            h = clock.set(body.height)
        else:
            h = clock.advance(int(body.advance or 0))
    except ValueError as e:
        raise ApiError.bad_request("clock_rewind", str(e), {"height": clock.height})
    return {"ok": True, "pointer": h, "epoch": tok.current_epoch()}
