from __future__ import annotations

from fastapi import APIRouter, Request, Response

from epochledger.api.routes_public_parts.common import _amount, _token
from epochledger.runtime.metrics import format_prometheus, metrics_enabled

router = APIRouter()


@router.get("/token")
def token_info(request: Request):
    tok = _token(request)
    info = tok.describe()
    info["total_supply"] = _amount(info["total_supply"])
    return {"ok": True, **info}


@router.get("/epochs/current")
def current_epoch(request: Request):
    tok = _token(request)
    p = tok.pointer()
    first, last = tok.ledger.window.index_range(p)
    start, end = tok.ledger.window.epoch_bounds(last)
    return {
        "ok": True,
        "pointer": p,
        "epoch": last,
        "first_valid_epoch": first,
        "last_valid_epoch": last,
        "epoch_start": start,
        "epoch_end": end,
    }


@router.get("/epochs/{epoch}/expired")
def epoch_expired(epoch: int, request: Request):
    tok = _token(request)
    return {"ok": True, "epoch": epoch, "expired": tok.is_epoch_expired(epoch)}


@router.get("/metrics")
def token_metrics(request: Request) -> Response:
    """Prometheus text: transition counters plus supply and epoch gauges.

    Off unless EPOCHLEDGER_METRICS_ENABLED=1.
    """
    if not metrics_enabled():
        return Response(status_code=404, content="not_found\n", media_type="text/plain")
    tok = getattr(request.app.state, "token", None)
    gauges = tok.ledger.gauges(tok.pointer()) if tok is not None else None
    return Response(content=format_prometheus(gauges), media_type="text/plain")
