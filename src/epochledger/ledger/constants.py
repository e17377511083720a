# src/epochledger/ledger/constants.py
"""Ledger constants.

Window bounds:
- bucket duration: 1 .. 31,556,926 timeline units (one mean solar year in seconds)
- window size: 1 .. 254 trailing epochs

The zero account is the mint source and burn sink. It never holds buckets.
"""

from __future__ import annotations

# Window bounds (strict setup)
MIN_BUCKET_DURATION: int = 1
MAX_BUCKET_DURATION: int = 31_556_926

MIN_WINDOW_SIZE: int = 1
MAX_WINDOW_SIZE: int = 254

# Expiry modes
EXPIRY_MODE_EPOCH: str = "epoch"
EXPIRY_MODE_SLIDING: str = "sliding"
EXPIRY_MODES = (EXPIRY_MODE_EPOCH, EXPIRY_MODE_SLIDING)

# Null participant
ZERO_ACCOUNT: str = "0x0000000000000000000000000000000000000000"

# type(uint256).max: an allowance of this size is never decremented
MAX_ALLOWANCE: int = 2**256 - 1

# Token metadata defaults
DEFAULT_TOKEN_NAME: str = "Expiring Point"
DEFAULT_TOKEN_SYMBOL: str = "XPT"
DEFAULT_DECIMALS: int = 18
