from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Request

from epochledger.api.routes_public_parts.common import _amount, _token

router = APIRouter()


@router.get("/accounts/{account}/balance")
def account_balance(account: str, request: Request, epoch: Optional[int] = None):
    tok = _token(request)
    if epoch is None:
        return {"ok": True, "account": account, "balance": _amount(tok.balance_of(account))}
    return {
        "ok": True,
        "account": account,
        "epoch": epoch,
        "balance": _amount(tok.balance_of_at_epoch(epoch, account)),
    }


@router.get("/accounts/{account}/epochs")
def account_epochs(account: str, request: Request):
    """Per-epoch balances for every epoch in the valid window (zero epochs omitted)."""
    tok = _token(request)
    first, last = tok.valid_epoch_range()
    out = []
    for e in range(first, last + 1):
        bal = tok.balance_of_at_epoch(e, account)
        if bal:
            out.append({"epoch": e, "balance": _amount(bal)})
    return {"ok": True, "account": account, "first_valid_epoch": first, "last_valid_epoch": last, "epochs": out}


@router.get("/accounts/{account}/epochs/{epoch}/buckets")
def account_buckets(account: str, epoch: int, request: Request):
    tok = _token(request)
    buckets = [{"position": p, "amount": _amount(a)} for p, a in tok.token_list(account, epoch)]
    return {
        "ok": True,
        "account": account,
        "epoch": epoch,
        "expired": tok.is_epoch_expired(epoch),
        "buckets": buckets,
    }


@router.get("/allowances/{owner}/{spender}")
def allowance(owner: str, spender: str, request: Request):
    tok = _token(request)
    return {"ok": True, "owner": owner, "spender": spender, "allowance": _amount(tok.allowance(owner, spender))}
