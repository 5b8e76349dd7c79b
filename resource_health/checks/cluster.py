# SPDX-License-Identifier: MIT

"""Namespace and HorizontalPodAutoscaler."""

from __future__ import annotations

import json
from typing import Any

from resource_health.documents import nested_maps, nested_str, split_api_version
from resource_health.exceptions import UnsupportedResourceError
from resource_health.models import Health, HealthStatus, StatusCode
from resource_health.settings import EvaluationContext

HPA_CONDITIONS_ANNOTATION = "autoscaling.alpha.kubernetes.io/conditions"

HPA_DEGRADED = {
    ("AbleToScale", "FailedGetScale"),
    ("AbleToScale", "FailedUpdateScale"),
    ("ScalingActive", "FailedGetResourceMetric"),
    ("ScalingActive", "InvalidSelector"),
}
HPA_HEALTHY = {
    ("AbleToScale", "SucceededRescale"),
    ("ScalingLimited", "DesiredWithinRange"),
    ("ScalingLimited", "TooFewReplicas"),
    ("ScalingLimited", "TooManyReplicas"),
}


def namespace_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus:
    if nested_str(obj, "status", "phase") == "Active":
        return HealthStatus(ready=True, health=Health.UNKNOWN, status=StatusCode.HEALTHY)
    return HealthStatus(health=Health.UNKNOWN, status=StatusCode.TERMINATING)


def _hpa_conditions(obj: dict[str, Any]) -> list[dict[str, Any]]:
    _, version = split_api_version(str(obj.get("apiVersion") or ""))
    if version != "v1":
        return nested_maps(obj, "status", "conditions")
    raw = nested_str(obj, "metadata", "annotations", HPA_CONDITIONS_ANNOTATION)
    if not raw:
        return []
    try:
        conditions = json.loads(raw)
    except ValueError as exc:
        raise UnsupportedResourceError(f"invalid {HPA_CONDITIONS_ANNOTATION} annotation: {exc}") from exc
    if not isinstance(conditions, list):
        raise UnsupportedResourceError(f"invalid {HPA_CONDITIONS_ANNOTATION} annotation: expected a list")
    return [c for c in conditions if isinstance(c, dict)]


def hpa_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus:
    conditions = _hpa_conditions(obj)

    for cond in conditions:
        if (cond.get("type"), cond.get("reason")) in HPA_DEGRADED:
            return HealthStatus(
                health=Health.UNHEALTHY, status=StatusCode.DEGRADED, message=str(cond.get("message") or ""),
            )

    for cond in conditions:
        if (cond.get("type"), cond.get("reason")) in HPA_HEALTHY:
            return HealthStatus(
                ready=True, health=Health.HEALTHY, status=StatusCode.HEALTHY,
                message=str(cond.get("message") or ""),
            )

    return HealthStatus(health=Health.UNKNOWN, status=StatusCode.PROGRESSING, message="Waiting to Autoscale")
