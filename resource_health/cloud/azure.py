# SPDX-License-Identifier: MIT

from __future__ import annotations

import logging
from typing import Any

from resource_health.documents import parse_time
from resource_health.exceptions import UnsupportedResourceError
from resource_health.models import Health, HealthStatus, StatusCode
from resource_health.settings import EvaluationContext
from resource_health.utils import compact_duration

logger = logging.getLogger("resource_health.cloud.azure")

APP_REGISTRATION_PREFIX = "Azure::AppRegistration::"
EXPIRING_TYPES = frozenset({
    APP_REGISTRATION_PREFIX + "ClientSecret",
    APP_REGISTRATION_PREFIX + "Certificate",
})


def credential_expiry_health(resource_type: str, obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus:
    end = obj.get("endDateTime")
    if not end:
        return HealthStatus(health=Health.UNKNOWN, message="End date time is not set")
    try:
        end_time = parse_time(end)
    except UnsupportedResourceError as exc:
        logger.debug("invalid endDateTime on %s: %s", resource_type, exc)
        return HealthStatus(health=Health.UNKNOWN, message=f"{end} is not a valid date time")

    if end_time < ctx.now:
        return HealthStatus(health=Health.UNHEALTHY, status=StatusCode.EXPIRED, message=f"{resource_type} has expired")
    remaining = ctx.until(end_time)
    if remaining < ctx.settings.azure_expiry_warning_period:
        return HealthStatus(
            health=Health.WARNING,
            status=StatusCode.EXPIRING,
            message=f"{resource_type} is expiring in {compact_duration(remaining)}",
        )
    return HealthStatus(health=Health.HEALTHY, status=StatusCode.HEALTHY, message=f"{resource_type} is valid")


def get_azure_health(config_type: str, obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus:
    if config_type in EXPIRING_TYPES:
        return credential_expiry_health(config_type[len(APP_REGISTRATION_PREFIX):], obj, ctx)
    return HealthStatus(health=Health.UNKNOWN)
