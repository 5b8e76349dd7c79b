# SPDX-License-Identifier: MIT

"""Classify free-form status strings reported by cloud providers and CRDs.

The status is split into words (delimiters and camelCase boundaries) and
title-cased; that canonical form is the reported status. Classification
matches the lower-cased canonical form against the ordered RULES table,
so classifying an already canonical status gives the same answer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from resource_health.models import Health, HealthStatus
from resource_health.utils import human_case


@dataclass(frozen=True)
class StatusRule:
    name: str
    matches: Callable[[str], bool]
    health: Health
    ready: bool


def _one_of(*words: str) -> Callable[[str], bool]:
    keys = frozenset(words)
    return lambda status: status in keys


def _prefix(*prefixes: str) -> Callable[[str], bool]:
    return lambda status: status.startswith(prefixes)


def _contains(fragment: str) -> Callable[[str], bool]:
    return lambda status: fragment in status


# First match wins.
RULES: list[StatusRule] = [
    StatusRule("transient", _one_of(
        "update complete cleanup in progress", "update in progress", "updating",
        "maintenance", "rebooting", "storage full", "storage optimization",
        "upgrading", "resetting master credentials", "modifying", "reconciling",
    ), Health.HEALTHY, False),
    StatusRule("quiesced", _one_of(
        "stopped", "terminated", "delete complete", "deleted",
    ), Health.UNKNOWN, True),
    StatusRule("in flight", _one_of(
        "creating", "stopping", "shutting down", "deleting", "provisioning", "staging",
        "suspending", "delete in progress", "import in progress",
    ), Health.UNKNOWN, False),
    StatusRule("failed", _one_of(
        "create failed", "delete failed", "import rollback failed", "rollback failed",
        "update failed", "update rollback failed", "failed", "error", "insufficient capacity",
    ), Health.UNHEALTHY, True),
    StatusRule("succeeded", _one_of(
        "running", "active", "create complete", "import complete", "update complete",
        "available", "in use", "ready",
    ), Health.HEALTHY, True),
    StatusRule("degraded", _one_of(
        "rollback in progress", "import rollback in progress", "update rollback in progress",
        "degraded", "restoring",
    ), Health.WARNING, False),
    StatusRule("degraded ready", _one_of(
        "suspended", "import rollback complete", "rollback complete", "update rollback complete",
        "active impaired",
    ), Health.WARNING, True),
    StatusRule("inaccessible", _prefix("inaccessible", "incompatible"), Health.UNHEALTHY, True),
    StatusRule("error", _contains("error"), Health.UNHEALTHY, True),
    StatusRule("configuring", _prefix("configuring"), Health.HEALTHY, False),
]


def classify(status: str) -> StatusRule | None:
    key = human_case(status).lower()
    for rule in RULES:
        if rule.matches(key):
            return rule
    return None


def get_health_from_status_name(status: str, *reasons: str) -> HealthStatus:
    """Classify ``status``; the first non-empty reason becomes the message."""
    result = HealthStatus(status=human_case(status))
    for reason in reasons:
        if reason:
            result.message = reason
            break
    rule = classify(status)
    if rule is not None:
        result.health = rule.health
        result.ready = rule.ready
    return result
