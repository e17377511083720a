from __future__ import annotations

import os
from pathlib import Path

import pytest

from epochledger.env import load_dotenv_if_present, reset_dotenv_state


def test_dotenv_loads_once_and_env_wins(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    p = tmp_path / ".env"
    p.write_text("EPOCHLEDGER_DOTENV_LOADED=from-file\nEPOCHLEDGER_DOTENV_KEEP=from-file\n", encoding="utf-8")
    monkeypatch.delenv("EPOCHLEDGER_DOTENV_LOADED", raising=False)
    monkeypatch.setenv("EPOCHLEDGER_DOTENV_KEEP", "from-env")
    monkeypatch.setenv("EPOCHLEDGER_DOTENV_PATH", str(p))

    reset_dotenv_state()
    try:
        assert load_dotenv_if_present() is True
        assert os.environ["EPOCHLEDGER_DOTENV_LOADED"] == "from-file"
        assert os.environ["EPOCHLEDGER_DOTENV_KEEP"] == "from-env"
        # second call is a no-op
        assert load_dotenv_if_present() is False
    finally:
        os.environ.pop("EPOCHLEDGER_DOTENV_LOADED", None)
        reset_dotenv_state()


def test_missing_dotenv_is_not_an_error(tmp_path: Path) -> None:
    reset_dotenv_state()
    try:
        assert load_dotenv_if_present(str(tmp_path / "nope.env")) is False
    finally:
        reset_dotenv_state()
