# SPDX-License-Identifier: MIT

"""Flux Kustomization, HelmRelease and source kinds.

Conditions are scanned from the most to the least significant type. The
first condition that says something decides. A Degraded or undecided
verdict is refined by the condition table afterwards.
"""

from __future__ import annotations

from typing import Any

from resource_health.documents import nested_maps
from resource_health.models import Health, HealthStatus, StatusCode
from resource_health.settings import EvaluationContext

POSITIVE_TYPES = {"Healthy", "Ready", "Released"}

CONDITION_RANK = {
    "Ready": 4,
    "Healthy": 4,
    "Released": 3,
    "FetchFailed": 1,
    "Reconciling": 1,
}
DEFAULT_RANK = 2


def _rank(cond: dict[str, Any]) -> int:
    return CONDITION_RANK.get(str(cond.get("type") or ""), DEFAULT_RANK)


def _message(cond: dict[str, Any]) -> str:
    return f"{cond.get('reason') or ''}: {cond.get('message') or ''}"


def flux_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus:
    conditions = sorted(nested_maps(obj, "status", "conditions"), key=_rank, reverse=True)
    for cond in conditions:
        cond_type = cond.get("type")
        status = cond.get("status")
        if cond_type in POSITIVE_TYPES:
            if status == "True":
                return HealthStatus(ready=True, health=Health.HEALTHY, status=StatusCode.HEALTHY, message=_message(cond))
            if status == "False":
                return HealthStatus(health=Health.UNHEALTHY, status=StatusCode.DEGRADED, message=_message(cond))
        elif status == "True" and cond_type != "Reconciling":
            return HealthStatus(health=Health.UNHEALTHY, status=StatusCode.DEGRADED, message=_message(cond))
    return HealthStatus(health=Health.UNKNOWN)
