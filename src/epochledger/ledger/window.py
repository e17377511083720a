# src/epochledger/ledger/window.py
"""Sliding window calculator.

Maps a timeline position (block height or unix timestamp) to an epoch index
and to the range of epochs whose buckets are still spendable.

    epoch(t) = (t - origin) // duration     for t > origin
    epoch(t) = 0                            otherwise (clamp, not a real epoch 0)

    index_range(t) = (max(0, epoch(t) - size), epoch(t))

The range is inclusive on both ends, so it spans size + 1 epochs. The oldest
epoch of the range is the only one that can hold buckets straddling the
expiry boundary (sliding mode).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from epochledger.ledger.constants import (
    EXPIRY_MODE_EPOCH,
    EXPIRY_MODE_SLIDING,
    EXPIRY_MODES,
    MAX_BUCKET_DURATION,
    MAX_WINDOW_SIZE,
    MIN_BUCKET_DURATION,
    MIN_WINDOW_SIZE,
)
from epochledger.runtime.errors import InvalidDuration, InvalidSize, LedgerError, WindowAlreadyConfigured

Json = Dict[str, Any]


@dataclass
class SlidingWindow:
    origin_position: int = 0
    bucket_duration: int = 0
    window_size: int = 0
    expiry_mode: str = EXPIRY_MODE_EPOCH

    def setup(self, origin_position: int, bucket_duration: int, window_size: int, strict: bool = True) -> None:
        if self.is_configured():
            raise WindowAlreadyConfigured()

        origin = int(origin_position)
        duration = int(bucket_duration)
        size = int(window_size)

        if strict:
            if duration < MIN_BUCKET_DURATION or duration > MAX_BUCKET_DURATION:
                raise InvalidDuration(duration)
            if size < MIN_WINDOW_SIZE or size > MAX_WINDOW_SIZE:
                raise InvalidSize(size)
        else:
            # epoch math divides by the duration
            if duration < 1:
                raise InvalidDuration(duration)
            if size < 1:
                raise InvalidSize(size)

        self.origin_position = origin
        self.bucket_duration = duration
        self.window_size = size

    def set_expiry_mode(self, mode: str) -> None:
        m = str(mode or "").strip().lower()
        if m not in EXPIRY_MODES:
            raise LedgerError("invalid_config", "invalid_expiry_mode", {"mode": mode, "allowed": list(EXPIRY_MODES)})
        self.expiry_mode = m

    def clear(self) -> None:
        self.origin_position = 0
        self.bucket_duration = 0
        self.window_size = 0

    def is_configured(self) -> bool:
        return self.bucket_duration > 0

    def index_for(self, t: int) -> int:
        t = int(t)
        if self.bucket_duration <= 0 or t <= self.origin_position:
            return 0
        return (t - self.origin_position) // self.bucket_duration

    def index_range(self, t: int) -> Tuple[int, int]:
        last = self.index_for(t)
        first = last - self.window_size
        return (first if first > 0 else 0, last)

    @property
    def expiry_span(self) -> int:
        """Age (in timeline units) at which a bucket expires in sliding mode."""
        return self.window_size * self.bucket_duration

    def epoch_bounds(self, epoch: int) -> Tuple[int, int]:
        """First and last timeline position belonging to `epoch`."""
        start = self.origin_position + int(epoch) * self.bucket_duration
        return (start, start + self.bucket_duration - 1)

    def is_expired(self, position: int, t: int) -> bool:
        """Whether a bucket created at `position` is unspendable at `t`."""
        if self.expiry_mode == EXPIRY_MODE_SLIDING:
            return int(t) - int(position) >= self.expiry_span
        return self.index_for(t) - self.index_for(position) > self.window_size

    def is_epoch_expired(self, epoch: int, t: int) -> bool:
        first, _ = self.index_range(t)
        return int(epoch) < first

    def as_dict(self) -> Json:
        return {
            "origin_position": int(self.origin_position),
            "bucket_duration": int(self.bucket_duration),
            "window_size": int(self.window_size),
            "expiry_mode": str(self.expiry_mode),
        }


__all__ = ["SlidingWindow", "EXPIRY_MODE_EPOCH", "EXPIRY_MODE_SLIDING"]
