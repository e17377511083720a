# src/epochledger/api/__main__.py
from __future__ import annotations

import uvicorn

from epochledger.env import load_dotenv_if_present


def main() -> None:
    # Load .env early so EPOCHLEDGER_* vars exist before anything reads them.
    load_dotenv_if_present()

    # Import after dotenv load (prevents "config read before env" surprises)
    from epochledger.api.app import create_app
    from epochledger.runtime.ledger_config import apply_ledger_config_to_env, load_ledger_config

    cfg = load_ledger_config()
    apply_ledger_config_to_env(cfg)

    uvicorn.run(create_app(), host=cfg.api_host, port=int(cfg.api_port), log_level=cfg.log_level.lower())


if __name__ == "__main__":
    main()
