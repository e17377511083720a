from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Request

from epochledger.api.routes_public_parts.common import _int_param

router = APIRouter()

_MAX_LIMIT = 1000


@router.get("/events")
def recent_events(request: Request, limit: Optional[str] = None, account: Optional[str] = None):
    journal = getattr(request.app.state, "journal", None)
    if journal is None:
        return {"ok": True, "events": []}
    lim = min(max(_int_param(limit, 100), 0), _MAX_LIMIT)
    events = []
    for ev in journal.recent(lim, account=(account or "").strip() or None):
        d = ev.to_dict()
        d["amount"] = str(d["amount"])
        events.append(d)
    return {"ok": True, "events": events}
