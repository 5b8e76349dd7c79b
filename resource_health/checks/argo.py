# SPDX-License-Identifier: MIT

from __future__ import annotations

from typing import Any

from resource_health.documents import nested_str
from resource_health.models import Health, HealthStatus, StatusCode
from resource_health.settings import EvaluationContext

# Argo's own health vocabulary.
ARGO_HEALTH = {
    StatusCode.HEALTHY: Health.HEALTHY,
    StatusCode.PROGRESSING: Health.UNKNOWN,
    StatusCode.DEGRADED: Health.UNHEALTHY,
    StatusCode.SUSPENDED: Health.UNKNOWN,
    StatusCode.MISSING: Health.UNKNOWN,
    StatusCode.UNKNOWN: Health.UNKNOWN,
}

WORKFLOW_PHASES = {
    "": (StatusCode.PROGRESSING, False),
    "Pending": (StatusCode.PROGRESSING, False),
    "Running": (StatusCode.PROGRESSING, True),
    "Succeeded": (StatusCode.HEALTHY, True),
    "Failed": (StatusCode.DEGRADED, True),
    "Error": (StatusCode.DEGRADED, True),
}


def workflow_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus:
    phase = nested_str(obj, "status", "phase")
    message = nested_str(obj, "status", "message")
    status, ready = WORKFLOW_PHASES.get(phase, (StatusCode.UNKNOWN, False))
    return HealthStatus(ready=ready, health=ARGO_HEALTH[status], status=status, message=message)


def application_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus:
    status = nested_str(obj, "status", "health", "status")
    return HealthStatus(
        ready=nested_str(obj, "status", "sync", "status") == "Synced",
        health=ARGO_HEALTH.get(status, Health.UNKNOWN),
        status=status,
        message=nested_str(obj, "status", "health", "message"),
    )
