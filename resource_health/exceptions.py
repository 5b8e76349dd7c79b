# SPDX-License-Identifier: MIT

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from resource_health.models import HealthStatus


class HealthCheckError(Exception):
    """Base class for errors raised while evaluating a resource."""

    def __init__(self, message: str, status: HealthStatus | None = None):
        super().__init__(message)
        self.status = status


class UnsupportedResourceError(HealthCheckError):
    """Input the engine cannot assess: bad field value, unparsable timestamp.

    Always converted into an Unknown verdict by the orchestrator.
    """


class ResourceConversionError(HealthCheckError):
    """The document cannot be projected onto the shape its kind requires."""


class OverrideError(HealthCheckError):
    """An override port failed while evaluating a resource."""
