"""Pointer sources.

The ledger's only external input is the current timeline position. A pointer
source is any zero-argument callable returning a non-decreasing int.
"""

from __future__ import annotations

import threading
import time
from typing import Callable

PointerSource = Callable[[], int]

POINTER_SOURCE_BLOCK = "block"
POINTER_SOURCE_TIMESTAMP = "timestamp"
POINTER_SOURCES = (POINTER_SOURCE_BLOCK, POINTER_SOURCE_TIMESTAMP)


class BlockClock:
    """Host-driven block height. Never moves backwards."""

    def __init__(self, height: int = 0) -> None:
        if int(height) < 0:
            raise ValueError(f"height must be >= 0; got: {height}")
        self._lock = threading.Lock()
        self._height = int(height)

    def __call__(self) -> int:
        with self._lock:
            return self._height

    @property
    def height(self) -> int:
        return self()

    def set(self, height: int) -> int:
        h = int(height)
        with self._lock:
            if h < self._height:
                raise ValueError(f"block height cannot rewind: {self._height} -> {h}")
            self._height = h
            return self._height

    def advance(self, blocks: int = 1) -> int:
        n = int(blocks)
        if n < 0:
            raise ValueError(f"blocks must be >= 0; got: {blocks}")
        with self._lock:
            self._height += n
            return self._height


class UnixClock:
    """Wall-clock unix seconds, clamped so it never reports an earlier second."""

    def __init__(self, now: Callable[[], float] = time.time) -> None:
        self._now = now
        self._lock = threading.Lock()
        self._last = 0

    def __call__(self) -> int:
        t = int(self._now())
        with self._lock:
            if t < self._last:
                return self._last
            self._last = t
            return t


def build_pointer_source(kind: str, *, start: int = 0) -> PointerSource:
    k = str(kind or "").strip().lower()
    if k == POINTER_SOURCE_BLOCK:
        return BlockClock(start)
    if k == POINTER_SOURCE_TIMESTAMP:
        return UnixClock()
    raise ValueError(f"pointer_source must be one of {POINTER_SOURCES}; got: {kind!r}")
