# SPDX-License-Identifier: MIT

from __future__ import annotations

from datetime import timedelta
from typing import Any

from resource_health.documents import creation_timestamp, nested, nested_list, nested_str
from resource_health.models import Health, HealthStatus, StatusCode
from resource_health.settings import EvaluationContext

LOAD_BALANCER_PROVISION_TIMEOUT = timedelta(hours=1)


def service_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus:
    if nested_str(obj, "spec", "type") != "LoadBalancer":
        return HealthStatus(ready=True, health=Health.UNKNOWN, status=StatusCode.UNKNOWN)

    if nested_list(obj, "status", "loadBalancer", "ingress"):
        return HealthStatus(ready=True, health=Health.HEALTHY, status=StatusCode.RUNNING)

    hs = HealthStatus(health=Health.UNKNOWN, status=StatusCode.CREATING)
    created = creation_timestamp(obj)
    if created is not None and ctx.since(created) > LOAD_BALANCER_PROVISION_TIMEOUT:
        hs.health = Health.UNHEALTHY
        hs.message = "load balancer has not been provisioned"
    return hs


def ingress_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus:
    if nested(obj, "status", "loadBalancer", "ingress") is None:
        return HealthStatus(
            health=Health.HEALTHY, status=StatusCode.PENDING,
            message="ingress loadbalancer status not found",
        )
    if not nested_list(obj, "status", "loadBalancer", "ingress"):
        return HealthStatus(health=Health.UNKNOWN, status=StatusCode.PENDING)
    return HealthStatus(ready=True, health=Health.HEALTHY, status=StatusCode.HEALTHY)
