# SPDX-License-Identifier: MIT

"""Formatting helpers and the container start deadline."""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Any

# Never deem a workload unhealthy within this window after creation.
START_BUFFER_PERIOD = timedelta(minutes=10)

# Kubernetes API defaults for probe fields that are omitted.
PROBE_DEFAULTS = {
    "initialDelaySeconds": 0,
    "periodSeconds": 10,
    "timeoutSeconds": 1,
    "failureThreshold": 3,
}

_WORD = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")


def split_words(text: str) -> list[str]:
    """Split on delimiters and camelCase boundaries: ``PodInitializing`` -> Pod, Initializing."""
    return _WORD.findall(text.replace("_", " ").replace("-", " "))


def human_case(text: str) -> str:
    """``shutting-down`` -> ``Shutting Down``, ``MemoryPressure`` -> ``Memory Pressure``."""
    return " ".join(w.capitalize() for w in split_words(text))


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: max(limit - 3, 0)] + "..."


def _seconds(d: timedelta) -> int:
    return int(d.total_seconds())


def go_duration(d: timedelta) -> str:
    """Format whole seconds the way Go prints a ``time.Duration``: ``1h2m0s``, ``40m0s``."""
    total = _seconds(d)
    sign = "-" if total < 0 else ""
    total = abs(total)
    hours, rem = divmod(total, 3600)
    minutes, seconds = divmod(rem, 60)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def human_duration(d: timedelta) -> str:
    """Two-unit approximation used by kubectl (``3m20s``, ``5h10m``, ``3d4h``)."""
    seconds = _seconds(d)
    if seconds < -1:
        return "<invalid>"
    if seconds < 0:
        return "0s"
    if seconds < 120:
        return f"{seconds}s"
    minutes = seconds // 60
    if minutes < 10:
        s = seconds % 60
        return f"{minutes}m" if s == 0 else f"{minutes}m{s}s"
    if minutes < 180:
        return f"{minutes}m"
    hours = minutes // 60
    if hours < 8:
        m = minutes % 60
        return f"{hours}h" if m == 0 else f"{hours}h{m}m"
    if hours < 48:
        return f"{hours}h"
    if hours < 24 * 8:
        h = hours % 24
        return f"{hours // 24}d" if h == 0 else f"{hours // 24}d{h}h"
    if hours < 24 * 365 * 2:
        return f"{hours // 24}d"
    years = hours // 24 // 365
    if hours < 24 * 365 * 8:
        dy = (hours // 24) % 365
        return f"{years}y" if dy == 0 else f"{years}y{dy}d"
    return f"{years}y"


def short_human_duration(d: timedelta) -> str:
    """Single-unit duration: ``45s``, ``12m``, ``3h``, ``2d``, ``1y``."""
    seconds = _seconds(d)
    if seconds < -1:
        return "<invalid>"
    if seconds < 0:
        return "0s"
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h"
    if seconds < 86400 * 365:
        return f"{seconds // 86400}d"
    return f"{seconds // (86400 * 365)}y"


def compact_duration(d: timedelta) -> str:
    """Fixed-width duration: ``2w0d0h``, ``3d4h``, ``5h0m``, ``12m30s``."""
    seconds = max(_seconds(d), 0)
    weeks, rem = divmod(seconds, 7 * 86400)
    days, rem = divmod(rem, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, secs = divmod(rem, 60)
    if weeks:
        return f"{weeks}w{days}d{hours}h"
    if days:
        return f"{days}d{hours}h"
    if hours:
        return f"{hours}h{minutes}m"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


def truncate_to(d: timedelta, unit: timedelta) -> timedelta:
    return unit * (d // unit)


def format_time(ts: datetime) -> str:
    return ts.strftime("%Y-%m-%d %H:%M:%S %z")


def _probe_int(probe: dict[str, Any], key: str) -> int:
    value = probe.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return PROBE_DEFAULTS[key]
    return value


def start_deadline(containers: list[dict[str, Any]]) -> timedelta:
    """Longest time any container may legitimately take to become ready."""
    longest = START_BUFFER_PERIOD
    for container in containers:
        probe = container.get("readinessProbe") if isinstance(container, dict) else None
        if not isinstance(probe, dict):
            continue
        seconds = _probe_int(probe, "initialDelaySeconds") + _probe_int(probe, "failureThreshold") * (
            _probe_int(probe, "periodSeconds") + _probe_int(probe, "timeoutSeconds")
        )
        longest = max(longest, timedelta(seconds=seconds))
    return truncate_to(longest, timedelta(minutes=1))
