# SPDX-License-Identifier: MIT

"""Thresholds and the clock used by a single evaluation."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Mapping

CERT_EXPIRY_WARNING_PERIOD = timedelta(hours=48)
CERT_RENEWAL_WARNING_PERIOD = timedelta(minutes=30)
AZURE_EXPIRY_WARNING_PERIOD = timedelta(days=30)

PROPERTY_CERT_EXPIRY = "health.cert-manager.expiryGracePeriod"
PROPERTY_CERT_RENEWAL = "health.cert-manager.renewalGracePeriod"
PROPERTY_AZURE_EXPIRY = "health.azure.expiryGracePeriod"

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h|d|w)")
_DURATION_UNITS = {
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_duration(value: str) -> timedelta:
    """Parse a Go-style duration such as ``48h``, ``1h30m`` or ``7d``."""
    text = str(value).strip()
    if not text:
        raise ValueError("empty duration")
    pos = 0
    total = timedelta()
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            raise ValueError(f"invalid duration: {value!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return total


@dataclass(frozen=True)
class HealthSettings:
    cert_expiry_warning_period: timedelta = CERT_EXPIRY_WARNING_PERIOD
    cert_renewal_warning_period: timedelta = CERT_RENEWAL_WARNING_PERIOD
    azure_expiry_warning_period: timedelta = AZURE_EXPIRY_WARNING_PERIOD
    clock: Callable[[], datetime] = field(default=_utcnow, compare=False)

    @classmethod
    def from_properties(
        cls, properties: Mapping[str, str], base: HealthSettings | None = None,
    ) -> HealthSettings:
        """Build settings from flat ``key=value`` properties.

        Unknown keys are ignored; an unparsable duration raises ``ValueError``.
        """
        settings = base or cls()
        overrides: dict[str, timedelta] = {}
        if properties.get(PROPERTY_CERT_EXPIRY):
            overrides["cert_expiry_warning_period"] = parse_duration(properties[PROPERTY_CERT_EXPIRY])
        if properties.get(PROPERTY_CERT_RENEWAL):
            overrides["cert_renewal_warning_period"] = parse_duration(properties[PROPERTY_CERT_RENEWAL])
        if properties.get(PROPERTY_AZURE_EXPIRY):
            overrides["azure_expiry_warning_period"] = parse_duration(properties[PROPERTY_AZURE_EXPIRY])
        return replace(settings, **overrides) if overrides else settings


DEFAULT_SETTINGS = HealthSettings()


@dataclass(frozen=True)
class EvaluationContext:
    now: datetime
    settings: HealthSettings

    @classmethod
    def create(cls, settings: HealthSettings | None = None) -> EvaluationContext:
        settings = settings or DEFAULT_SETTINGS
        now = settings.clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return cls(now=now, settings=settings)

    def since(self, ts: datetime) -> timedelta:
        return self.now - ts

    def until(self, ts: datetime) -> timedelta:
        return ts - self.now
