# SPDX-License-Identifier: MIT

from __future__ import annotations

from typing import Any

from resource_health.documents import nested_bool, nested_list, nested_maps, nested_time
from resource_health.models import Health, HealthStatus, StatusCode
from resource_health.settings import EvaluationContext
from resource_health.utils import format_time, go_duration


def job_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus:
    for cond in nested_maps(obj, "status", "conditions"):
        if cond.get("status") != "True":
            continue
        message = str(cond.get("message") or "")
        cond_type = cond.get("type")
        if cond_type == "Failed":
            return HealthStatus(
                ready=True, health=Health.UNHEALTHY,
                status=str(cond.get("reason") or StatusCode.FAILED), message=message,
            )
        if cond_type == "Complete":
            return HealthStatus(ready=True, health=Health.HEALTHY, status=StatusCode.COMPLETED, message=message)
        if cond_type == "Suspended":
            return HealthStatus(health=Health.UNKNOWN, status=StatusCode.SUSPENDED, message=message)
    return HealthStatus(health=Health.HEALTHY, status=StatusCode.RUNNING)


def cronjob_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus:
    if nested_bool(obj, "spec", "suspend"):
        return HealthStatus(health=Health.UNKNOWN, status=StatusCode.SUSPENDED, message="CronJob is suspended")

    last_schedule = nested_time(obj, "status", "lastScheduleTime")
    if last_schedule is None:
        return HealthStatus(health=Health.UNKNOWN, message="Not scheduled yet")

    last_success = nested_time(obj, "status", "lastSuccessfulTime")
    if last_success is None:
        return HealthStatus(health=Health.UNHEALTHY, status=StatusCode.ERROR, message="No successful run yet")

    if nested_list(obj, "status", "active"):
        return HealthStatus(
            health=Health.HEALTHY, status=StatusCode.RUNNING,
            message=f"Running since {format_time(last_schedule)}",
        )

    if last_success < last_schedule:
        # the last scheduled run did happen, it just failed
        return HealthStatus(
            ready=True, health=Health.UNHEALTHY, status=StatusCode.ERROR,
            message=f"Last run failed, last successful run was {format_time(last_success)}",
        )

    return HealthStatus(
        ready=True, health=Health.HEALTHY, status=StatusCode.COMPLETED,
        message=f"Last run at {format_time(last_schedule)} in {go_duration(last_success - last_schedule)}",
    )
