# SPDX-License-Identifier: MIT

from __future__ import annotations

from typing import Any

from resource_health.documents import nested_str
from resource_health.models import Health, HealthStatus, StatusCode
from resource_health.settings import EvaluationContext

PVC_PHASES: dict[str, HealthStatus] = {
    "Bound": HealthStatus(ready=True, health=Health.HEALTHY, status=StatusCode.HEALTHY),
    "Pending": HealthStatus(health=Health.HEALTHY, status=StatusCode.PROGRESSING),
    "Lost": HealthStatus(health=Health.UNHEALTHY, status=StatusCode.DEGRADED),
}


def pvc_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus:
    phase = nested_str(obj, "status", "phase")
    known = PVC_PHASES.get(phase)
    if known is None:
        return HealthStatus(health=Health.UNKNOWN, status=StatusCode.UNKNOWN)
    return HealthStatus(ready=known.ready, health=known.health, status=known.status)
