# SPDX-License-Identifier: MIT

"""Flanksource Canary and Notification resources."""

from __future__ import annotations

import re
from datetime import timedelta
from typing import Any

from resource_health.documents import nested_int, nested_str, nested_time
from resource_health.models import Health, HealthStatus
from resource_health.settings import EvaluationContext
from resource_health.utils import human_duration

CANARY_MIN_UPTIME = 80.0
NOTIFICATION_FAILURE_WARN = timedelta(hours=12)
NOTIFICATION_FAILURE_RECENT = timedelta(hours=1)

# "3/4 (75%)" or "75%"
_UPTIME = re.compile(r"(?:\((\d+\.?\d*)%\))|(\d+\.?\d*)%")


def parse_uptime(uptime: str) -> float | None:
    match = _UPTIME.search(uptime)
    if match is None:
        return None
    return float(match.group(1) or match.group(2))


def canary_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus:
    error = nested_str(obj, "status", "errorMessage")
    if error:
        return HealthStatus(health=Health.UNHEALTHY, message=error)

    canary_status = nested_str(obj, "status", "status")
    uptime = nested_str(obj, "status", "uptime1h")
    hs = HealthStatus(
        ready=True,
        status=canary_status,
        message=nested_str(obj, "status", "message") or f"uptime: {uptime}",
    )
    if canary_status == "Passed":
        hs.health = Health.HEALTHY
        percent = parse_uptime(uptime)
        if percent is not None and percent < CANARY_MIN_UPTIME:
            hs.health = Health.WARNING
    elif canary_status == "Failed":
        hs.health = Health.UNHEALTHY
    elif canary_status == "Invalid":
        # needs manual intervention
        hs.health = Health.UNHEALTHY
        hs.ready = False
    return hs


def notification_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus:
    error = nested_str(obj, "status", "error")
    if error:
        return HealthStatus(health=Health.UNHEALTHY, message=error)

    sent = nested_int(obj, "status", "sent")
    failed = nested_int(obj, "status", "failed")
    pending = nested_int(obj, "status", "pending")

    hs = HealthStatus(ready=True, health=Health.UNKNOWN)
    if sent > 0:
        hs.health = Health.WARNING if failed or pending else Health.HEALTHY
    elif failed > 0:
        hs.health = Health.UNHEALTHY
    elif pending > 0:
        hs.health = Health.WARNING

    last_failed = nested_time(obj, "status", "lastFailed")
    if last_failed is not None:
        since = ctx.since(last_failed)
        if since <= NOTIFICATION_FAILURE_WARN:
            hs.health = Health.UNHEALTHY if since <= NOTIFICATION_FAILURE_RECENT else Health.WARNING
            hs.message = f"Failed {human_duration(since)} ago"
    return hs
