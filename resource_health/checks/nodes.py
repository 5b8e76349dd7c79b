# SPDX-License-Identifier: MIT

from __future__ import annotations

from typing import Any, NamedTuple

from resource_health.documents import find_condition, nested_maps, nested_str
from resource_health.models import Health, HealthStatus, StatusCode
from resource_health.settings import EvaluationContext
from resource_health.utils import human_case

UNSCHEDULABLE_TAINT = "node.kubernetes.io/unschedulable"


class Expectation(NamedTuple):
    status: str
    severity: Health


# Expected status of each node condition and how bad a violation is.
# Healthy severities are informational notices.
NODE_CONDITIONS: dict[str, Expectation] = {
    "MemoryPressure": Expectation("False", Health.WARNING),
    "DiskPressure": Expectation("False", Health.WARNING),
    "PIDPressure": Expectation("False", Health.WARNING),
    "NetworkUnavailable": Expectation("False", Health.UNHEALTHY),
    "KernelDeadlock": Expectation("False", Health.UNHEALTHY),
    "ReadonlyFilesystem": Expectation("False", Health.UNHEALTHY),
    "KubeletProblem": Expectation("False", Health.UNHEALTHY),
    "ContainerRuntimeProblem": Expectation("False", Health.UNHEALTHY),
    "FilesystemCorruptionProblem": Expectation("False", Health.UNHEALTHY),
    "FrequentKubeletRestart": Expectation("False", Health.WARNING),
    "FrequentDockerRestart": Expectation("False", Health.WARNING),
    "FrequentContainerdRestart": Expectation("False", Health.WARNING),
    "FrequentUnregisterNetDevice": Expectation("False", Health.WARNING),
    "CorruptDockerOverlay2": Expectation("False", Health.WARNING),
    "VMEventScheduled": Expectation("False", Health.WARNING),
    "KubeletConfigDeprecation": Expectation("False", Health.HEALTHY),
    "ContainerRuntimeDeprecation": Expectation("False", Health.HEALTHY),
    "CgroupV1Deprecation": Expectation("False", Health.HEALTHY),
}

# Conditions not listed above are reported only when True.
UNLISTED_CONDITION = Expectation("False", Health.WARNING)


def node_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus:
    phase = nested_str(obj, "status", "phase")
    if phase and phase != "Running":
        return HealthStatus(health=Health.UNKNOWN, status=phase)

    conditions = nested_maps(obj, "status", "conditions")
    hs = HealthStatus(health=Health.UNKNOWN, status=StatusCode.UNKNOWN)

    ready = find_condition(conditions, "Ready")
    if ready is not None:
        if ready.get("status") != "True":
            return HealthStatus(
                health=Health.UNHEALTHY,
                status=str(ready.get("reason") or "NotReady"),
                message=str(ready.get("message") or ""),
            )
        hs = HealthStatus(ready=True, health=Health.HEALTHY, status=StatusCode.RUNNING)

    for cond in conditions:
        cond_type = str(cond.get("type") or "")
        if cond_type == "Ready":
            continue
        expected = NODE_CONDITIONS.get(cond_type, UNLISTED_CONDITION)
        if cond.get("status") == expected.status or cond.get("status") == "Unknown":
            continue
        message = str(cond.get("message") or "")
        if expected.severity == Health.HEALTHY:
            hs.append_message(message or human_case(cond_type))
            continue
        escalated = hs.health.worst(expected.severity)
        if escalated.order > hs.health.order:
            hs.health = escalated
            hs.status = human_case(cond_type)
            hs.message = message

    for taint in nested_maps(obj, "spec", "taints"):
        if taint.get("key") == UNSCHEDULABLE_TAINT and taint.get("effect") == "NoSchedule":
            hs.health = hs.health.worst(Health.WARNING)
            hs.status = StatusCode.UNSCHEDULABLE
            hs.ready = False
            hs.prepend_message("Node is cordoned")
            break

    return hs
