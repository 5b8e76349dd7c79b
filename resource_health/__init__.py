# SPDX-License-Identifier: MIT

"""Health classification for Kubernetes and cloud resources."""

from resource_health.engine import (
    OverridePort,
    evaluate,
    evaluate_with_error,
    get_health_by_config_type,
    last_updated,
)
from resource_health.exceptions import (
    HealthCheckError,
    OverrideError,
    ResourceConversionError,
    UnsupportedResourceError,
)
from resource_health.models import Health, HealthStatus, StatusCode
from resource_health.settings import DEFAULT_SETTINGS, HealthSettings

__version__ = "1.0.0"

__all__ = [
    "DEFAULT_SETTINGS",
    "Health",
    "HealthCheckError",
    "HealthSettings",
    "HealthStatus",
    "OverrideError",
    "OverridePort",
    "ResourceConversionError",
    "StatusCode",
    "UnsupportedResourceError",
    "evaluate",
    "evaluate_with_error",
    "get_health_by_config_type",
    "last_updated",
]
