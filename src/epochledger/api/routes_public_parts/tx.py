from __future__ import annotations

from fastapi import APIRouter, Request

from epochledger.api.routes_public_parts.common import _amount, _caller, _token
from epochledger.api.schemas import ApproveRequest, TransferFromRequest, TransferRequest
from epochledger.runtime.metrics import inc_counter

router = APIRouter()


@router.post("/transfer")
def transfer(body: TransferRequest, request: Request):
    """Spend the caller's oldest value first, or only value from `epoch` when given."""
    tok = _token(request)
    sender = _caller(request)
    if body.epoch is None:
        tok.transfer(sender, body.to, body.amount)
    else:
        tok.transfer_at_epoch(sender, body.epoch, body.to, body.amount)
    inc_counter("api_requests_total", route="transfer", scope="window" if body.epoch is None else "epoch")
    return {
        "ok": True,
        "from": sender,
        "to": body.to,
        "amount": _amount(body.amount),
        "epoch": body.epoch,
        "balance": _amount(tok.balance_of(sender)),
    }


@router.post("/transfer-from")
def transfer_from(body: TransferFromRequest, request: Request):
    tok = _token(request)
    spender = _caller(request)
    if body.epoch is None:
        tok.transfer_from(spender, body.owner, body.to, body.amount)
    else:
        tok.transfer_from_at_epoch(spender, body.epoch, body.owner, body.to, body.amount)
    inc_counter("api_requests_total", route="transfer_from", scope="window" if body.epoch is None else "epoch")
    return {
        "ok": True,
        "spender": spender,
        "from": body.owner,
        "to": body.to,
        "amount": _amount(body.amount),
        "epoch": body.epoch,
        "allowance": _amount(tok.allowance(body.owner, spender)),
    }


@router.post("/approve")
def approve(body: ApproveRequest, request: Request):
    tok = _token(request)
    owner = _caller(request)
    tok.approve(owner, body.spender, body.amount)
    return {"ok": True, "owner": owner, "spender": body.spender, "allowance": _amount(body.amount)}
