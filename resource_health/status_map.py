# SPDX-License-Identifier: MIT

"""Generic condition evaluator driven by a declarative per-kind table.

Each table entry maps a condition ``type`` to rules describing what a True,
False or Unknown condition contributes to the verdict. When several
conditions write the same field, the rule with the higher ``order`` wins.
The default table ships as ``data/status_map.yaml`` and is loaded once at
import time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from importlib import resources
from typing import Any

import yaml

from resource_health.documents import split_api_version
from resource_health.models import Condition, GenericStatus, Health, HealthStatus

logger = logging.getLogger("resource_health.status_map")

CROSSPLANE_KEY = "crossplane.io"
_CROSSPLANE_GROUPS = ("crossplane.io", "upbound.io")


@dataclass
class _Accumulator:
    """Merge state for one evaluation: a value plus a priority for each field."""

    ready: bool = False
    health: Health = Health.UNKNOWN
    health_order: int = 0
    status: str = ""
    status_order: int = 0
    message: str = ""
    message_order: int = 0
    matched: bool = False

    def set_health(self, health: Health, order: int) -> None:
        if order >= self.health_order or self.health == Health.UNKNOWN:
            self.health = health
            self.health_order = order

    def set_status(self, status: str, order: int) -> None:
        if not self.status or order >= self.status_order:
            self.status = status
            self.status_order = order

    def set_message(self, message: str, order: int) -> None:
        if not self.message or order >= self.message_order:
            self.message = message
            self.message_order = order

    def to_status(self) -> HealthStatus:
        return HealthStatus(ready=self.ready, health=self.health, status=self.status, message=self.message)


@dataclass(frozen=True)
class OnCondition:
    order: int = 0
    ready: bool = False
    not_ready: bool = False
    message: bool = False
    health: Health | None = None
    status: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> OnCondition | None:
        if data is None:
            return None
        if not isinstance(data, dict):
            raise ValueError(f"condition rule must be a mapping, got {data!r}")
        health = data.get("health")
        return cls(
            order=int(data.get("order", 0)),
            ready=bool(data.get("ready", False)),
            not_ready=bool(data.get("notReady", False)),
            message=bool(data.get("message", False)),
            health=Health(health) if health else None,
            status=str(data.get("status") or ""),
        )

    def apply(self, acc: _Accumulator, cond: Condition) -> None:
        acc.matched = True
        if self.ready:
            acc.ready = True
        if self.not_ready:
            acc.ready = False
        if self.health is not None:
            acc.set_health(self.health, self.order)
        if self.status:
            acc.set_status(self.status, self.order)
        elif cond.reason:
            acc.set_status(cond.reason, self.order)
        if self.message and cond.message:
            acc.set_message(cond.message, self.order)


@dataclass(frozen=True)
class ConditionRule:
    on_true: OnCondition
    on_false: OnCondition | None = None
    on_unknown: OnCondition | None = None
    reasons: dict[str, OnCondition] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConditionRule:
        if not isinstance(data, dict):
            raise ValueError(f"condition rule must be a mapping, got {data!r}")
        reasons = {
            str(reason): OnCondition.from_dict(rule)
            for reason, rule in (data.get("reasons") or {}).items()
        }
        return cls(
            on_true=OnCondition.from_dict(data),
            on_false=OnCondition.from_dict(data.get("onFalse")),
            on_unknown=OnCondition.from_dict(data.get("onUnknown")),
            reasons=reasons,
        )

    def apply(self, acc: _Accumulator, cond: Condition) -> None:
        rule = self.on_true
        if cond.is_true:
            rule.apply(acc, cond)
        elif cond.is_false and self.on_false is not None:
            self.on_false.apply(acc, cond)
        elif cond.is_false:
            acc.matched = True
            if rule.health == Health.HEALTHY:
                # A condition that signals health when True signals trouble when False.
                acc.health = Health.UNHEALTHY
                acc.health_order = max(acc.health_order, rule.order)
                if rule.message:
                    acc.message = cond.message
                    acc.message_order = max(acc.message_order, rule.order)
                if not acc.status and cond.reason:
                    acc.set_status(cond.reason, rule.order)
            if rule.ready and not acc.status and cond.reason:
                acc.set_status(cond.reason, rule.order)
            if rule.message and cond.message:
                acc.set_message(cond.message, rule.order)
        elif self.on_unknown is not None:
            self.on_unknown.apply(acc, cond)

        override = self.reasons.get(cond.reason)
        if override is not None:
            override.apply(acc, cond)


@dataclass(frozen=True)
class StatusMap:
    conditions: dict[str, ConditionRule] = field(default_factory=dict)
    unhealthy_is_not_ready: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StatusMap:
        if not isinstance(data, dict):
            raise ValueError(f"status map entry must be a mapping, got {data!r}")
        return cls(
            conditions={
                str(t): ConditionRule.from_dict(rule)
                for t, rule in (data.get("conditions") or {}).items()
            },
            unhealthy_is_not_ready=bool(data.get("unhealthyIsNotReady", False)),
        )

    def evaluate(self, status: GenericStatus) -> tuple[HealthStatus, bool]:
        """Return the verdict and whether any condition rule applied."""
        if not self.conditions:
            return HealthStatus(), False
        acc = _Accumulator()
        for cond in status.conditions:
            rule = self.conditions.get(cond.type)
            if rule is not None:
                rule.apply(acc, cond)
        if self.unhealthy_is_not_ready and acc.health != Health.HEALTHY:
            acc.ready = False
        return acc.to_status(), acc.matched


def load_status_maps(text: str) -> dict[str, StatusMap]:
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError("status map document must be a mapping of kind to entry")
    return {str(key): StatusMap.from_dict(entry) for key, entry in data.items()}


def _load_default() -> dict[str, StatusMap]:
    text = resources.files("resource_health").joinpath("data/status_map.yaml").read_text(encoding="utf-8")
    return load_status_maps(text)


DEFAULT_STATUS_MAPS: dict[str, StatusMap] = _load_default()


def lookup_key(api_version: str, kind: str) -> str:
    group, _ = split_api_version(api_version)
    if group.endswith(_CROSSPLANE_GROUPS):
        return CROSSPLANE_KEY
    return kind


def find_status_map(
    api_version: str, kind: str, maps: dict[str, StatusMap] | None = None,
) -> StatusMap | None:
    maps = DEFAULT_STATUS_MAPS if maps is None else maps
    specific = maps.get(f"{api_version}/{kind}")
    if specific is not None:
        return specific
    return maps.get(lookup_key(api_version, kind))


def get_generic_health(
    obj: dict[str, Any], maps: dict[str, StatusMap] | None = None,
) -> tuple[HealthStatus | None, bool]:
    """Evaluate ``obj`` against its kind's table.

    Returns ``(None, False)`` when the kind has no entry.
    """
    api_version = obj.get("apiVersion") or ""
    kind = obj.get("kind") or ""
    status_map = find_status_map(str(api_version), str(kind), maps)
    if status_map is None:
        return None, False
    logger.debug("evaluating %s/%s with the condition table", api_version, kind)
    return status_map.evaluate(GenericStatus.from_document(obj))
