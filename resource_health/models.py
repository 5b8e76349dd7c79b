# SPDX-License-Identifier: MIT

"""Health model: severity ordering, status vocabulary and the verdict record."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class Health(str, Enum):
    UNKNOWN = "unknown"
    HEALTHY = "healthy"
    WARNING = "warning"
    UNHEALTHY = "unhealthy"

    @property
    def order(self) -> int:
        return _HEALTH_ORDER.index(self)

    def worst(self, *others: Health) -> Health:
        return worst(self, *others)

    def is_worse_than(self, other: Health) -> bool:
        # Equal values count as worse. Exit codes and threshold filters rely on it.
        return self.order >= other.order

    @classmethod
    def parse(cls, value: str | None) -> Health:
        if not value:
            return cls.UNKNOWN
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN


_HEALTH_ORDER = [Health.UNKNOWN, Health.HEALTHY, Health.WARNING, Health.UNHEALTHY]


def worst(*healths: Health) -> Health:
    """Return the health with the highest order index, Unknown when empty."""
    result = Health.UNKNOWN
    for h in healths:
        if h.order > result.order:
            result = h
    return result


class StatusCode:
    """Canonical status vocabulary. Statuses are plain strings and the set is open."""

    UNKNOWN = "Unknown"
    PROGRESSING = "Progressing"
    HEALTHY = "Healthy"
    SUSPENDED = "Suspended"
    DEGRADED = "Degraded"
    MISSING = "Missing"
    EVICTED = "Evicted"
    COMPLETED = "Completed"
    CRASH_LOOP_BACKOFF = "CrashLoopBackOff"
    CRASHED = "Crashed"
    CREATING = "Creating"
    DELETED = "Deleted"
    DELETING = "Deleting"
    TERMINATING = "Terminating"
    TERMINATING_STALLED = "TerminatingStalled"
    ERROR = "Error"
    ROLLOUT_FAILED = "Rollout Failed"
    INACCESSIBLE = "Inaccessible"
    INFO = "Info"
    PENDING = "Pending"
    MAINTENANCE = "Maintenance"
    SCALING = "Scaling"
    RESTARTING = "Restarting"
    STARTING = "Starting"
    FAILED = "Failed"
    FAILED_CREATE = "Failed Create"
    UNSCHEDULABLE = "Unschedulable"
    UPGRADE_FAILED = "UpgradeFailed"
    OOM_KILLED = "OOMKilled"
    SCALING_UP = "Scaling Up"
    SCALED_TO_ZERO = "Scaled to Zero"
    SCALING_DOWN = "Scaling Down"
    RUNNING = "Running"
    ROLLING_OUT = "Rolling Out"
    UNHEALTHY = "Unhealthy"
    UPDATING = "Updating"
    WARNING = "Warning"
    STOPPED = "Stopped"
    STOPPING = "Stopping"
    EXPIRED = "Expired"
    EXPIRING = "Expiring"
    HEALTH_PARSE_ERROR = "HealthParseError"

    # Generic reconciliation words rather than concrete verdicts.
    AMBIGUOUS = frozenset({SUSPENDED, DEGRADED, PROGRESSING})

    @classmethod
    def is_ambiguous(cls, status: str) -> bool:
        return status in cls.AMBIGUOUS


@dataclass
class HealthStatus:
    ready: bool = False
    health: Health = Health.UNKNOWN
    status: str = ""
    message: str = ""
    last_updated: datetime | None = None

    def __str__(self) -> str:
        return f"{self.status} ({self.health.value}): {self.message}"

    def merge(self, *others: HealthStatus | None) -> HealthStatus:
        merged = HealthStatus(self.ready, self.health, self.status, self.message, self.last_updated)
        for other in others:
            if other is None:
                continue
            merged = HealthStatus(
                ready=merged.ready and other.ready,
                health=merged.health.worst(other.health),
                status=merged.status or other.status,
                message=", ".join(m for m in (merged.message, other.message) if m),
                last_updated=merged.last_updated,
            )
        return merged

    def append_message(self, msg: str) -> None:
        if not msg:
            return
        self.message = f"{self.message}, {msg}" if self.message else msg

    def prepend_message(self, msg: str) -> None:
        if not msg:
            return
        self.message = f"{msg}, {self.message}" if self.message else msg

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"ready": self.ready, "health": self.health.value}
        if self.status:
            data["status"] = self.status
        if self.message:
            data["message"] = self.message
        if self.last_updated is not None:
            data["lastUpdated"] = self.last_updated.strftime("%Y-%m-%dT%H:%M:%SZ")
        return data


@dataclass(frozen=True)
class Condition:
    type: str
    status: str = "Unknown"
    reason: str = ""
    message: str = ""
    last_transition_time: str = ""

    @property
    def is_true(self) -> bool:
        return self.status == "True"

    @property
    def is_false(self) -> bool:
        return self.status == "False"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Condition:
        return cls(
            type=str(data.get("type") or ""),
            status=str(data.get("status") or "Unknown"),
            reason=str(data.get("reason") or ""),
            message=str(data.get("message") or ""),
            last_transition_time=str(data.get("lastTransitionTime") or ""),
        )


@dataclass
class GenericStatus:
    """Read-only projection of a resource's ``status`` sub-document."""

    conditions: list[Condition] = field(default_factory=list)
    fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_document(cls, obj: dict[str, Any]) -> GenericStatus:
        status = obj.get("status")
        if not isinstance(status, dict):
            return cls()
        raw_conditions = status.get("conditions")
        conditions = []
        for raw in raw_conditions if isinstance(raw_conditions, list) else []:
            if isinstance(raw, dict) and raw.get("type"):
                conditions.append(Condition.from_dict(raw))
        return cls(conditions=conditions, fields=status)

    def find_condition(self, condition_type: str) -> Condition | None:
        for cond in self.conditions:
            if cond.type == condition_type:
                return cond
        return None

    def condition_status(self, condition_type: str) -> str:
        cond = self.find_condition(condition_type)
        return cond.status if cond else ""

    def field_int(self, name: str, default: int = 0) -> int:
        value = self.fields.get(name)
        if isinstance(value, bool) or not isinstance(value, int):
            return default
        return value
