# src/epochledger/runtime/ledger_config.py
from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from epochledger.ledger.constants import (
    DEFAULT_DECIMALS,
    DEFAULT_TOKEN_NAME,
    DEFAULT_TOKEN_SYMBOL,
    EXPIRY_MODE_EPOCH,
    EXPIRY_MODES,
    MAX_BUCKET_DURATION,
    MAX_WINDOW_SIZE,
)
from epochledger.runtime.clock import POINTER_SOURCE_BLOCK, POINTER_SOURCES

Json = Dict[str, Any]


def _as_int(v: Any, default: int) -> int:
    try:
        return int(v)
    except Exception:
        return int(default)


def _as_str(v: Any, default: str) -> str:
    if v is None:
        return str(default)
    s = str(v)
    return s if s.strip() else str(default)


def _as_bool(v: Any, default: bool) -> bool:
    if v is None:
        return bool(default)
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in {"1", "true", "yes", "y", "on"}:
        return True
    if s in {"0", "false", "no", "n", "off"}:
        return False
    return bool(default)


@dataclass(frozen=True)
class LedgerConfig:
    ledger_id: str
    mode: str  # "dev" | "testnet" | "prod"

    token_name: str
    token_symbol: str
    decimals: int

    # Window
    origin_position: int
    bucket_duration: int
    window_size: int
    strict_window: bool
    expiry_mode: str  # "epoch" | "sliding"

    # Where the pointer comes from: a host-advanced block height or unix seconds.
    pointer_source: str  # "block" | "timestamp"

    api_host: str
    api_port: int

    log_level: str


_ALLOWED_MODES = {"dev", "testnet", "prod"}


def validate_ledger_config(cfg: LedgerConfig) -> None:
    """Fail-fast validation for operator config.

    The window parameters are fixed for the life of a ledger, so a bad value
    here must stop startup rather than surface on the first transfer.
    """

    if not isinstance(cfg.ledger_id, str) or not cfg.ledger_id.strip():
        raise ValueError("ledger_id must be a non-empty string")

    mode = str(cfg.mode or "").strip().lower()
    if mode not in _ALLOWED_MODES:
        raise ValueError(f"mode must be one of {_ALLOWED_MODES}; got: {cfg.mode!r}")

    if not str(cfg.token_symbol or "").strip():
        raise ValueError("token_symbol must be a non-empty string")

    if int(cfg.decimals) < 0 or int(cfg.decimals) > 77:
        raise ValueError(f"decimals must be 0..77; got: {cfg.decimals}")

    if int(cfg.origin_position) < 0:
        raise ValueError(f"origin_position must be >= 0; got: {cfg.origin_position}")

    if int(cfg.bucket_duration) <= 0:
        raise ValueError(f"bucket_duration must be > 0; got: {cfg.bucket_duration}")

    if int(cfg.window_size) <= 0:
        raise ValueError(f"window_size must be > 0; got: {cfg.window_size}")

    if cfg.strict_window:
        if int(cfg.bucket_duration) > MAX_BUCKET_DURATION:
            raise ValueError(f"bucket_duration must be <= {MAX_BUCKET_DURATION}; got: {cfg.bucket_duration}")
        if int(cfg.window_size) > MAX_WINDOW_SIZE:
            raise ValueError(f"window_size must be <= {MAX_WINDOW_SIZE}; got: {cfg.window_size}")

    if str(cfg.expiry_mode or "").strip().lower() not in EXPIRY_MODES:
        raise ValueError(f"expiry_mode must be one of {EXPIRY_MODES}; got: {cfg.expiry_mode!r}")

    if str(cfg.pointer_source or "").strip().lower() not in POINTER_SOURCES:
        raise ValueError(f"pointer_source must be one of {POINTER_SOURCES}; got: {cfg.pointer_source!r}")

    if int(cfg.api_port) <= 0 or int(cfg.api_port) > 65535:
        raise ValueError(f"api_port must be 1..65535; got: {cfg.api_port}")


def default_ledger_config() -> LedgerConfig:
    return ledger_config_from_dict({})


def ledger_config_from_dict(raw: Json) -> LedgerConfig:
    return LedgerConfig(
        ledger_id=_as_str(raw.get("ledger_id"), "epochledger-dev"),
        # Production-safe default: debug endpoints stay off unless asked for.
        mode=_as_str(raw.get("mode"), "prod").strip().lower(),
        token_name=_as_str(raw.get("token_name"), DEFAULT_TOKEN_NAME),
        token_symbol=_as_str(raw.get("token_symbol"), DEFAULT_TOKEN_SYMBOL),
        decimals=_as_int(raw.get("decimals"), DEFAULT_DECIMALS),
        origin_position=_as_int(raw.get("origin_position"), 0),
        # ~1 day of 5s blocks per epoch, 4 epochs valid
        bucket_duration=_as_int(raw.get("bucket_duration"), 17_280),
        window_size=_as_int(raw.get("window_size"), 4),
        strict_window=_as_bool(raw.get("strict_window"), True),
        expiry_mode=_as_str(raw.get("expiry_mode"), EXPIRY_MODE_EPOCH).strip().lower(),
        pointer_source=_as_str(raw.get("pointer_source"), POINTER_SOURCE_BLOCK).strip().lower(),
        api_host=_as_str(raw.get("api_host"), "127.0.0.1"),
        api_port=_as_int(raw.get("api_port"), 8080),
        log_level=_as_str(raw.get("log_level"), "INFO"),
    )


def read_ledger_config_file(path: str) -> LedgerConfig:
    """Read a JSON or YAML (.yaml/.yml) config file. Missing keys take defaults."""
    p = Path(path)
    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in {".yaml", ".yml"}:
        raw = yaml.safe_load(text)
    else:
        raw = json.loads(text)
    if not isinstance(raw, dict):
        raise ValueError("ledger config must be a mapping/object")

    cfg = ledger_config_from_dict(raw)
    validate_ledger_config(cfg)
    return cfg


def load_ledger_config(*, config_path: Optional[str] = None) -> LedgerConfig:
    p = config_path or os.environ.get("EPOCHLEDGER_CONFIG_PATH")
    if p:
        return read_ledger_config_file(p)

    cfg = default_ledger_config()
    validate_ledger_config(cfg)
    return cfg


def apply_ledger_config_to_env(cfg: LedgerConfig) -> None:
    validate_ledger_config(cfg)
    os.environ["EPOCHLEDGER_LEDGER_ID"] = cfg.ledger_id

    # API reads the mode to decide which debug routes exist.
    os.environ["EPOCHLEDGER_MODE"] = (cfg.mode or "prod").strip().lower()

    os.environ["EPOCHLEDGER_API_HOST"] = cfg.api_host
    os.environ["EPOCHLEDGER_API_PORT"] = str(int(cfg.api_port))
    os.environ["EPOCHLEDGER_LOG_LEVEL"] = cfg.log_level


def ledger_config_to_dict(cfg: LedgerConfig) -> Json:
    return asdict(cfg)
