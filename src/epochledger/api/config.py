import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ApiConfig:
    mode: str  # "dev" | "testnet" | "prod"
    admin_token: str | None


def load_api_config() -> ApiConfig:
    mode = os.getenv("EPOCHLEDGER_MODE", "prod").strip().lower()
    token = (os.getenv("EPOCHLEDGER_ADMIN_TOKEN") or "").strip() or None
    return ApiConfig(mode=mode, admin_token=token)


def _is_truthy(v: str | None) -> bool:
    if v is None:
        return False
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


def admin_open_without_token(mode: str) -> bool:
    """
    Dev convenience: admin routes need no token when none is configured.
    Production always requires EPOCHLEDGER_ADMIN_TOKEN.
    """
    env = os.getenv("EPOCHLEDGER_ALLOW_OPEN_ADMIN")
    if env is not None:
        return _is_truthy(env) and mode != "prod"
    return mode in {"dev", "testnet"}


def debug_routes_enabled(mode: str) -> bool:
    return mode != "prod"
