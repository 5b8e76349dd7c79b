# SPDX-License-Identifier: MIT

"""ECS task state machine: LastStatus, then StopCode, then StoppedReason."""

from __future__ import annotations

from typing import Any

from resource_health.models import Health, HealthStatus, StatusCode
from resource_health.utils import human_case

ECS_TASK = "AWS::ECS::Task"

STOP_CODES: dict[str, tuple[str, Health | None]] = {
    "TaskFailedToStart": ("TaskFailedToStart", Health.UNHEALTHY),
    "EssentialContainerExited": (StatusCode.CRASHED, Health.UNHEALTHY),
    "UserInitiated": (StatusCode.STOPPED, None),
    "ServiceSchedulerInitiated": (StatusCode.TERMINATING, None),
}

# Stopped reasons, keyed by the text before the first colon.
REASON_HEALTH: dict[str, tuple[Health, bool]] = {
    "ContainerRuntimeError": (Health.UNHEALTHY, False),
    "ContainerRuntimeTimeoutError": (Health.UNHEALTHY, False),
    "OutOfMemoryError": (Health.UNHEALTHY, False),
    "InternalError": (Health.UNHEALTHY, True),
    "CannotCreateVolumeError": (Health.UNHEALTHY, True),
    "ResourceNotFoundException": (Health.UNHEALTHY, True),
    "CannotStartContainerError": (Health.UNHEALTHY, True),
    "SpotInterruptionError": (Health.WARNING, False),
    "CannotStopContainerError": (Health.WARNING, False),
    "CannotInspectContainerError": (Health.WARNING, False),
    "TaskFailedToStart": (Health.UNHEALTHY, False),
    "ResourceInitializationError": (Health.UNHEALTHY, False),
    "CannotPullContainerError": (Health.UNHEALTHY, False),
}


def ecs_task_health(obj: dict[str, Any]) -> HealthStatus:
    last_status = str(obj.get("LastStatus") or "")
    hs = HealthStatus(status=human_case(last_status), health=Health.parse(obj.get("HealthStatus")))

    if last_status.upper() == "RUNNING":
        hs.health = Health.HEALTHY
        hs.ready = True
    elif last_status.upper() in ("STOPPED", "DELETED"):
        hs.health = Health.UNKNOWN
        hs.ready = True

    stop_code = obj.get("StopCode") or ""
    if isinstance(stop_code, str) and stop_code:
        status, health = STOP_CODES.get(stop_code, (stop_code, None))
        hs.status = status
        if health is not None:
            hs.health = health

    reason = obj.get("StoppedReason")
    if isinstance(reason, str) and reason.find(":") > 0:
        prefix, _, rest = reason.partition(":")
        hs.status = prefix
        hs.message = rest.strip()
        hs.health, hs.ready = REASON_HEALTH.get(prefix, (Health.UNHEALTHY, False))
    return hs
