"""Process-local ledger metrics.

Series are keyed by name plus labels, so one family covers every transition
kind (`ledger_events_total{kind="mint"}`) and every rejection reason
(`ledger_rejected_total{reason="insufficient_balance"}`). State gauges such as
total supply are not stored here: the ledger computes them on demand and the
/metrics route passes them to format_prometheus().
"""

from __future__ import annotations

import os
import threading
from typing import Any, Dict, Mapping, Optional, Tuple

Labels = Tuple[Tuple[str, str], ...]

_lock = threading.Lock()
_counters: Dict[str, Dict[Labels, int]] = {}


def metrics_enabled() -> bool:
    v = (os.environ.get("EPOCHLEDGER_METRICS_ENABLED") or "").strip().lower()
    return v in {"1", "true", "yes", "y", "on"}


def _labels(labels: Mapping[str, Any]) -> Labels:
    return tuple(sorted((str(k), str(v)) for k, v in labels.items()))


def inc_counter(name: str, value: int = 1, **labels: Any) -> None:
    """Add `value` to a counter series. Amount counters pass the amount as value."""
    with _lock:
        series = _counters.setdefault(name, {})
        key = _labels(labels)
        series[key] = series.get(key, 0) + int(value)


def counter_value(name: str, **labels: Any) -> int:
    with _lock:
        return int(_counters.get(name, {}).get(_labels(labels), 0))


def reset() -> None:
    with _lock:
        _counters.clear()


def _render(pre: str, name: str, labels: Labels, value: int) -> str:
    if not labels:
        return f"{pre}{name} {value}"
    inner = ",".join(f'{k}="{v}"' for k, v in labels)
    return f"{pre}{name}{{{inner}}} {value}"


def format_prometheus(gauges: Optional[Mapping[str, int]] = None, prefix: str = "epochledger_") -> str:
    """Render counters plus the caller's point-in-time gauges."""
    with _lock:
        counters = {name: dict(series) for name, series in _counters.items()}

    lines = []
    for name in sorted(counters):
        lines.append(f"# TYPE {prefix}{name} counter")
        for labels in sorted(counters[name]):
            lines.append(_render(prefix, name, labels, counters[name][labels]))
    for name in sorted(gauges or {}):
        lines.append(f"# TYPE {prefix}{name} gauge")
        lines.append(_render(prefix, name, (), int(gauges[name])))
    return "\n".join(lines) + "\n"
