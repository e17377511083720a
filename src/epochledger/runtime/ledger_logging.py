"""JSONL logging for ledger transitions and API requests.

One line per event: {"event", "ts_ms", **fields}. Token amounts are
uint256-sized, so integers past the 53-bit safe range are written as strings;
log pipelines that parse JSON numbers as doubles would silently round them.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict

from epochledger.runtime.events import LedgerEvent

Json = Dict[str, Any]

_MAX_SAFE_INT = 2**53 - 1


def get_logger(name: str = "ledger") -> logging.Logger:
    return logging.getLogger(f"epochledger.{name}")


def _exact(v: Any) -> Any:
    if isinstance(v, bool):
        return v
    if isinstance(v, int) and abs(v) > _MAX_SAFE_INT:
        return str(v)
    if isinstance(v, dict):
        return {str(k): _exact(x) for k, x in v.items()}
    if isinstance(v, (list, tuple)):
        return [_exact(x) for x in v]
    return v


def log_event(logger: logging.Logger, event: str, *, level: int = logging.INFO, **fields: Any) -> None:
    if not logger.isEnabledFor(level):
        return
    payload: Json = {str(k): _exact(v) for k, v in fields.items()}
    payload["event"] = str(event)
    payload["ts_ms"] = int(time.time() * 1000)
    logger.log(level, json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str))


def log_ledger_event(logger: logging.Logger, event: LedgerEvent) -> None:
    """Log a committed transition as `ledger_<kind>` with from/to/amount/epoch/seq."""
    log_event(logger, f"ledger_{event.kind}", **event.to_dict())
