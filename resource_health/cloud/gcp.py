# SPDX-License-Identifier: MIT

"""GCP resources with bespoke status fields and messages."""

from __future__ import annotations

from typing import Any

from resource_health.documents import nested
from resource_health.models import Health, HealthStatus
from resource_health.status_name import get_health_from_status_name


def _missing(kind: str, field: str) -> HealthStatus:
    return HealthStatus(health=Health.UNKNOWN, message=f"{kind} missing or invalid '{field}' field")


def disk_health(obj: dict[str, Any]) -> HealthStatus:
    status = obj.get("status")
    if not isinstance(status, str):
        return _missing("GCP::Compute::Disk", "status")
    size = obj.get("sizeGb")
    message = f"{size} GB" if isinstance(size, str) and size else "No size information"
    return get_health_from_status_name(status, message)


def instance_group_manager_health(obj: dict[str, Any]) -> HealthStatus:
    status = obj.get("status")
    if not isinstance(status, dict):
        return _missing("GCP::Compute::InstanceGroupManager", "status")

    target = obj.get("targetSize")
    target = int(target) if isinstance(target, (int, float)) and not isinstance(target, bool) else 0
    message = f"{target} instances" if target else "scaled to zero"

    if status.get("isStable") is True:
        return HealthStatus(ready=True, health=Health.HEALTHY, status="Ready", message=message)
    return get_health_from_status_name("degraded", message)


def sql_instance_health(obj: dict[str, Any]) -> HealthStatus:
    state = obj.get("state")
    if not isinstance(state, str):
        return _missing("GCP::Sqladmin::Instance", "state")

    details = []
    version = obj.get("databaseVersion")
    if isinstance(version, str) and version:
        details.append(version)
    disk = nested(obj, "settings", "dataDiskSizeGb")
    if isinstance(disk, str) and disk:
        details.append(f"{disk} GB")
    message = ", ".join(details) or "No details available"

    if state == "RUNNABLE":
        return HealthStatus(ready=True, health=Health.HEALTHY, status="Ready", message=message)
    return get_health_from_status_name(state, message)


GCP_HEALTH_CHECKS = {
    "GCP::Disk": disk_health,
    "GCP::InstanceGroupManager": instance_group_manager_health,
    "GCP::SQLInstance": sql_instance_health,
}


def get_gcp_health(config_type: str, obj: dict[str, Any]) -> HealthStatus:
    check = GCP_HEALTH_CHECKS.get(config_type)
    if check is None:
        return HealthStatus(health=Health.UNKNOWN)
    return check(obj)
