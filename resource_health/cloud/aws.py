# SPDX-License-Identifier: MIT

"""AWS resources: per-type status tables with the name heuristic as fallback."""

from __future__ import annotations

import logging
from typing import Any

from resource_health.cloud.ecs import ECS_TASK, ecs_task_health
from resource_health.documents import find_status_field
from resource_health.models import Health, HealthStatus, StatusCode
from resource_health.status_name import get_health_from_status_name
from resource_health.utils import human_case

logger = logging.getLogger("resource_health.cloud.aws")

# Health and readiness implied by each status code the tables produce.
CODE_HEALTH: dict[str, tuple[Health, bool]] = {
    StatusCode.HEALTHY: (Health.HEALTHY, True),
    StatusCode.RUNNING: (Health.HEALTHY, True),
    StatusCode.PENDING: (Health.UNKNOWN, False),
    StatusCode.CREATING: (Health.UNKNOWN, False),
    StatusCode.PROGRESSING: (Health.UNKNOWN, False),
    StatusCode.DELETING: (Health.UNKNOWN, False),
    StatusCode.STOPPING: (Health.UNKNOWN, False),
    StatusCode.STOPPED: (Health.UNKNOWN, True),
    StatusCode.DELETED: (Health.UNKNOWN, True),
    StatusCode.UPDATING: (Health.HEALTHY, False),
    StatusCode.MAINTENANCE: (Health.HEALTHY, False),
    StatusCode.RESTARTING: (Health.HEALTHY, False),
    StatusCode.WARNING: (Health.WARNING, True),
    StatusCode.ERROR: (Health.UNHEALTHY, True),
    StatusCode.INACCESSIBLE: (Health.UNHEALTHY, True),
    StatusCode.UNHEALTHY: (Health.UNHEALTHY, True),
}


def _normalize(status: str) -> str:
    return status.strip().lower().replace("_", "-")


def _table(entries: dict[str, str]) -> dict[str, str]:
    return {_normalize(k): v for k, v in entries.items()}


_RDS = _table({
    "available": StatusCode.HEALTHY,
    "backing-up": StatusCode.MAINTENANCE,
    "configuring-enhanced-monitoring": StatusCode.MAINTENANCE,
    "configuring-iam-database-auth": StatusCode.MAINTENANCE,
    "configuring-log-exports": StatusCode.MAINTENANCE,
    "converting-to-vpc": StatusCode.UPDATING,
    "creating": StatusCode.CREATING,
    "delete-precheck": StatusCode.MAINTENANCE,
    "deleting": StatusCode.DELETING,
    "failed": StatusCode.ERROR,
    "inaccessible-encryption-credentials": StatusCode.INACCESSIBLE,
    "inaccessible-encryption-credentials-recoverable": StatusCode.INACCESSIBLE,
    "incompatible-network": StatusCode.UNHEALTHY,
    "incompatible-option-group": StatusCode.UNHEALTHY,
    "incompatible-parameters": StatusCode.UNHEALTHY,
    "incompatible-restore": StatusCode.UNHEALTHY,
    "insufficient-capacity": StatusCode.UNHEALTHY,
    "maintenance": StatusCode.MAINTENANCE,
    "modifying": StatusCode.UPDATING,
    "moving-to-vpc": StatusCode.MAINTENANCE,
    "rebooting": StatusCode.RESTARTING,
    "renaming": StatusCode.MAINTENANCE,
    "resetting-master-credentials": StatusCode.MAINTENANCE,
    "restore-error": StatusCode.ERROR,
    "starting": StatusCode.PROGRESSING,
    "stopped": StatusCode.STOPPED,
    "stopping": StatusCode.STOPPING,
    "storage-config-upgrade": StatusCode.UPDATING,
    "storage-full": StatusCode.UNHEALTHY,
    "storage-optimization": StatusCode.MAINTENANCE,
    "upgrading": StatusCode.UPDATING,
})

AWS_STATUS_TABLES: dict[str, dict[str, str]] = {
    "AWS::EC2::Instance": _table({
        "pending": StatusCode.PENDING,
        "running": StatusCode.RUNNING,
        "shutting-down": StatusCode.DELETING,
        "terminated": StatusCode.DELETED,
        "stopping": StatusCode.STOPPING,
        "stopped": StatusCode.STOPPED,
    }),
    "AWS::EC2::Volume": _table({
        "creating": StatusCode.CREATING,
        "available": StatusCode.HEALTHY,
        "in-use": StatusCode.HEALTHY,
        "deleting": StatusCode.DELETING,
        "deleted": StatusCode.DELETED,
        "error": StatusCode.ERROR,
    }),
    "AWS::EKS::Cluster": _table({
        "creating": StatusCode.CREATING,
        "active": StatusCode.HEALTHY,
        "deleting": StatusCode.DELETING,
        "failed": StatusCode.ERROR,
        "updating": StatusCode.UPDATING,
        "pending": StatusCode.PENDING,
    }),
    "AWS::RDS::DBInstance": _RDS,
    "AWS::RDS::DBCluster": _RDS,
    "AWS::ElasticLoadBalancingV2::LoadBalancer": _table({
        "active": StatusCode.HEALTHY,
        "provisioning": StatusCode.PROGRESSING,
        "active_impaired": StatusCode.WARNING,
        "failed": StatusCode.ERROR,
    }),
    "AWS::Lambda::Function": _table({
        "pending": StatusCode.PENDING,
        "active": StatusCode.HEALTHY,
        "inactive": StatusCode.STOPPED,
        "failed": StatusCode.ERROR,
    }),
}

CLOUDFORMATION_STACK = "AWS::CloudFormation::Stack"

# Stack statuses are compound; each needs its own verdict.
STACK_STATUSES: dict[str, tuple[Health, bool]] = {
    "CREATE_IN_PROGRESS": (Health.UNKNOWN, False),
    "CREATE_FAILED": (Health.UNHEALTHY, True),
    "CREATE_COMPLETE": (Health.HEALTHY, True),
    "ROLLBACK_IN_PROGRESS": (Health.WARNING, False),
    "ROLLBACK_FAILED": (Health.UNHEALTHY, True),
    "ROLLBACK_COMPLETE": (Health.UNHEALTHY, True),
    "DELETE_IN_PROGRESS": (Health.UNKNOWN, False),
    "DELETE_FAILED": (Health.UNHEALTHY, True),
    "DELETE_COMPLETE": (Health.UNKNOWN, True),
    "UPDATE_IN_PROGRESS": (Health.HEALTHY, False),
    "UPDATE_COMPLETE_CLEANUP_IN_PROGRESS": (Health.HEALTHY, False),
    "UPDATE_COMPLETE": (Health.HEALTHY, True),
    "UPDATE_FAILED": (Health.UNHEALTHY, True),
    "UPDATE_ROLLBACK_IN_PROGRESS": (Health.WARNING, False),
    "UPDATE_ROLLBACK_FAILED": (Health.UNHEALTHY, True),
    "UPDATE_ROLLBACK_COMPLETE_CLEANUP_IN_PROGRESS": (Health.WARNING, False),
    "UPDATE_ROLLBACK_COMPLETE": (Health.WARNING, True),
    "REVIEW_IN_PROGRESS": (Health.UNKNOWN, False),
    "IMPORT_IN_PROGRESS": (Health.UNKNOWN, False),
    "IMPORT_COMPLETE": (Health.HEALTHY, True),
    "IMPORT_ROLLBACK_IN_PROGRESS": (Health.WARNING, False),
    "IMPORT_ROLLBACK_FAILED": (Health.UNHEALTHY, True),
    "IMPORT_ROLLBACK_COMPLETE": (Health.WARNING, True),
}


def _first(reasons: tuple[str, ...]) -> str:
    return next((r for r in reasons if r), "")


def is_known_type(resource_type: str) -> bool:
    return resource_type in AWS_STATUS_TABLES or resource_type == CLOUDFORMATION_STACK


def get_aws_resource_health(resource_type: str, status: str, *reasons: str) -> HealthStatus:
    """Classify ``status`` for ``resource_type`` (e.g. ``AWS::EC2::Instance``).

    Statuses missing from a known type's table fall back to the name
    heuristic, as does an empty type. Any other type is Unknown.
    """
    code = AWS_STATUS_TABLES.get(resource_type, {}).get(_normalize(status))
    if code is not None:
        health, ready = CODE_HEALTH[code]
        return HealthStatus(ready=ready, health=health, status=code, message=_first(reasons))

    if resource_type == CLOUDFORMATION_STACK:
        key = status.strip().upper().replace("-", "_")
        if key in STACK_STATUSES:
            health, ready = STACK_STATUSES[key]
            return HealthStatus(ready=ready, health=health, status=human_case(status), message=_first(reasons))

    if resource_type and not is_known_type(resource_type):
        return HealthStatus(health=Health.UNKNOWN, status=human_case(status), message=_first(reasons))
    return get_health_from_status_name(status, *reasons)


def get_aws_health(config_type: str, obj: dict[str, Any], *states: str) -> HealthStatus:
    if config_type == ECS_TASK:
        return ecs_task_health(obj)

    status = next((s for s in states if s), "") or find_status_field(obj)
    if not status:
        logger.debug("no status field found for %s", config_type)
        return HealthStatus(health=Health.UNKNOWN)
    reason = obj.get("StatusReason") or obj.get("StackStatusReason") or ""
    return get_aws_resource_health(config_type, status, str(reason))
