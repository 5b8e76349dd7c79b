# SPDX-License-Identifier: MIT

from __future__ import annotations

from datetime import timedelta
from typing import Any

from resource_health.documents import (
    creation_timestamp,
    deletion_timestamp,
    find_condition,
    nested_int,
    nested_map,
    nested_maps,
    nested_str,
    nested_time,
)
from resource_health.models import Health, HealthStatus, StatusCode
from resource_health.settings import EvaluationContext
from resource_health.utils import go_duration, start_deadline

POD_TERMINATING_WARN = timedelta(minutes=15)
TERMINATION_RECENT = timedelta(hours=1)
TERMINATION_IGNORE_AFTER = timedelta(hours=24)


def is_container_error(reason: str) -> bool:
    return reason.startswith("Err") or reason.endswith(("Error", "BackOff"))


def _waiting_signal(cs: dict[str, Any]) -> HealthStatus | None:
    waiting = nested_map(cs, "state", "waiting")
    if not waiting:
        return None
    reason = str(waiting.get("reason") or "")
    restarts = nested_int(cs, "restartCount")
    health = Health.UNKNOWN
    if is_container_error(reason) or restarts > 0:
        health = Health.UNHEALTHY
    return HealthStatus(health=health, status=reason, message=str(waiting.get("message") or ""))


def _terminated_signal(cs: dict[str, Any], state_key: str, ctx: EvaluationContext) -> HealthStatus | None:
    terminated = nested_map(cs, state_key, "terminated")
    if not terminated:
        return None
    reason = str(terminated.get("reason") or "")
    exit_code = nested_int(terminated, "exitCode")
    if reason == "Completed" and exit_code == 0:
        return None
    finished = nested_time(terminated, "finishedAt")
    if finished is None:
        return None
    age = ctx.since(finished)
    if age > TERMINATION_IGNORE_AFTER:
        return None
    name = cs.get("name", "")
    message = str(terminated.get("message") or "") or f'container "{name}" terminated with exit code {exit_code}'
    restarts = nested_int(cs, "restartCount")
    signal = HealthStatus(
        health=Health.UNHEALTHY if age < TERMINATION_RECENT else Health.WARNING,
        status=reason or StatusCode.ERROR,
        message=message,
    )
    if restarts > 0:
        signal.append_message(f"{name} has restarted {restarts} time(s)")
    return signal


def _container_signal(statuses: list[dict[str, Any]], ctx: EvaluationContext) -> HealthStatus | None:
    """The worst waiting or recent termination signal across all containers."""
    found: HealthStatus | None = None
    for cs in statuses:
        for signal in (
            _waiting_signal(cs),
            _terminated_signal(cs, "state", ctx),
            _terminated_signal(cs, "lastState", ctx),
        ):
            if signal is None:
                continue
            if found is None or signal.health.order > found.health.order:
                found = signal
    return found


def _fail_message(statuses: list[dict[str, Any]]) -> str:
    for cs in statuses:
        terminated = nested_map(cs, "state", "terminated")
        if not terminated:
            continue
        if terminated.get("message"):
            return str(terminated["message"])
        if terminated.get("reason") == "OOMKilled":
            return "OOMKilled"
        exit_code = nested_int(terminated, "exitCode")
        if exit_code != 0:
            return f'container "{cs.get("name", "")}" failed with exit code {exit_code}'
    return ""


def pod_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus:
    message = nested_str(obj, "status", "message")

    deleted = deletion_timestamp(obj)
    if deleted is not None:
        hs = HealthStatus(status=StatusCode.TERMINATING)
        stuck = ctx.since(deleted)
        if stuck >= POD_TERMINATING_WARN:
            hs.health = Health.WARNING
            hs.message = f"stuck in 'Terminating' for {go_duration(stuck)}"
        return hs

    if nested_str(obj, "status", "reason") == "Evicted":
        return HealthStatus(ready=True, health=Health.WARNING, status=StatusCode.EVICTED, message=message)

    conditions = nested_maps(obj, "status", "conditions")
    for cond in conditions:
        if cond.get("reason") == "Unschedulable":
            return HealthStatus(
                health=Health.UNHEALTHY, status=StatusCode.UNSCHEDULABLE, message=str(cond.get("message") or ""),
            )

    statuses = nested_maps(obj, "status", "initContainerStatuses") + nested_maps(obj, "status", "containerStatuses")
    phase = nested_str(obj, "status", "phase")

    if phase == "Succeeded":
        return HealthStatus(ready=True, health=Health.HEALTHY, status=StatusCode.COMPLETED, message=message)

    if phase == "Failed":
        return HealthStatus(
            ready=True, health=Health.UNHEALTHY, status=StatusCode.FAILED,
            message=message or _fail_message(statuses),
        )

    if phase not in ("Running", "Pending"):
        return HealthStatus(health=Health.UNKNOWN, status=StatusCode.UNKNOWN, message=message)

    ready_cond = find_condition(conditions, "Ready")
    is_ready = ready_cond is not None and ready_cond.get("status") == "True"
    hs = HealthStatus(
        ready=is_ready,
        health=Health.HEALTHY if is_ready else Health.UNHEALTHY,
        status=StatusCode.RUNNING if phase == "Running" else StatusCode.PENDING,
        message=message,
    )

    signal = _container_signal(statuses, ctx)
    from_signal = False
    if signal is not None and signal.status and signal.health.is_worse_than(hs.health):
        hs.health = signal.health
        hs.status = signal.status
        hs.message = signal.message or hs.message
        from_signal = True

    created = creation_timestamp(obj)
    containers = nested_maps(obj, "spec", "initContainers") + nested_maps(obj, "spec", "containers")
    starting = created is not None and ctx.since(created) < start_deadline(containers)
    if starting and hs.health == Health.UNHEALTHY and hs.status != StatusCode.OOM_KILLED:
        if from_signal:
            hs.prepend_message(hs.status)
        hs.health = Health.UNKNOWN
        hs.status = StatusCode.STARTING

    return hs
