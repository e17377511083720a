# src/epochledger/runtime/ledger_boot.py

from __future__ import annotations

from typing import Optional

from epochledger.runtime.clock import build_pointer_source
from epochledger.runtime.ledger import ExpiringLedger
from epochledger.runtime.ledger_config import LedgerConfig, load_ledger_config
from epochledger.runtime.ledger_logging import get_logger, log_event
from epochledger.runtime.token import ExpiringToken

_log = get_logger("boot")


def build_ledger(cfg: LedgerConfig) -> ExpiringLedger:
    return ExpiringLedger(
        origin_position=cfg.origin_position,
        bucket_duration=cfg.bucket_duration,
        window_size=cfg.window_size,
        strict=cfg.strict_window,
        expiry_mode=cfg.expiry_mode,
    )


def build_token(cfg: Optional[LedgerConfig] = None) -> ExpiringToken:
    """
    Build an ExpiringToken from an explicit config or, if omitted, from
    load_ledger_config() (EPOCHLEDGER_CONFIG_PATH or defaults).

    A block pointer source starts at origin_position, so the first epoch is 0.
    """
    c = cfg or load_ledger_config()
    token = ExpiringToken(
        ledger=build_ledger(c),
        pointer_source=build_pointer_source(c.pointer_source, start=c.origin_position),
        name=c.token_name,
        symbol=c.token_symbol,
        decimals=c.decimals,
        meta={"ledger_id": c.ledger_id, "mode": c.mode, "pointer_source": c.pointer_source},
    )
    log_event(
        _log,
        "ledger_boot",
        ledger_id=c.ledger_id,
        mode=c.mode,
        pointer_source=c.pointer_source,
        **token.ledger.window.as_dict(),
    )
    return token
