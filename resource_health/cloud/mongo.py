# SPDX-License-Identifier: MIT

from __future__ import annotations

from typing import Any

from resource_health.models import Health, HealthStatus, StatusCode


def get_mongo_health(obj: dict[str, Any]) -> HealthStatus:
    """Replica set members report their state name verbatim."""
    state_name = obj.get("stateName")
    if obj.get("clusterType") == "REPLICASET" and isinstance(state_name, str) and state_name:
        return HealthStatus(ready=True, health=Health.UNKNOWN, status=state_name)
    return HealthStatus(health=Health.UNKNOWN, status=StatusCode.UNKNOWN)
