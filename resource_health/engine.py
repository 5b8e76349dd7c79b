# SPDX-License-Identifier: MIT

"""Top-level evaluation: dispatch, override, condition-table refinement.

``evaluate`` resolves a Kubernetes-shaped document to its built-in check,
consults an optional override when nothing built-in decided (or the
built-in verdict is one of the ambiguous reconciliation words), refines
the result with the generic condition table and finally stamps the
deletion state and the last-updated time.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Protocol

from resource_health import checks
from resource_health.cloud import get_aws_health, get_azure_health, get_gcp_health, get_mongo_health
from resource_health.documents import find_status_field, gvk, nested, parse_time, to_document
from resource_health.exceptions import (
    HealthCheckError,
    OverrideError,
    ResourceConversionError,
    UnsupportedResourceError,
)
from resource_health.models import Health, HealthStatus, StatusCode
from resource_health.settings import EvaluationContext, HealthSettings
from resource_health.status_map import get_generic_health
from resource_health.status_name import get_health_from_status_name
from resource_health.utils import short_human_duration, truncate, truncate_to

logger = logging.getLogger("resource_health.engine")

TERMINATION_STALLED = timedelta(hours=1)
PARSE_ERROR_MESSAGE_LIMIT = 500
LAST_APPLIED_ANNOTATION = "kubectl.kubernetes.io/last-applied-configuration"

KUBERNETES_CONFIG_CLASSES = frozenset({"kubernetes", "crossplane", "missioncontrol", "flux", "argo"})

STATUS_TIME_PATHS = [
    ("lastUpdateTime",),
    ("startTime",),
    ("lastSyncTime",),
    ("reconciledAt",),
    ("startedAt",),
    ("deployedAt",),
    ("finishedAt",),
    ("lastTransitionTime",),
    ("observedAt",),
    ("operationState", "startedAt"),
    ("operationState", "finishedAt"),
]
CONDITION_TIME_FIELDS = ("lastProbeTime", "lastTransitionTime", "lastUpdateTime")
CONTAINER_TIME_PATHS = [
    ("state", "running", "startedAt"),
    ("state", "running", "finishedAt"),
    ("state", "terminated", "finishedAt"),
    ("lastState", "terminated", "finishedAt"),
]


class OverridePort(Protocol):
    """Custom health logic consulted when the built-in checks have no verdict."""

    def get_resource_health(self, resource: dict[str, Any]) -> HealthStatus | None:
        ...


def _max_time(current: datetime | None, value: Any) -> datetime | None:
    try:
        ts = parse_time(value) if isinstance(value, (str, datetime)) else None
    except UnsupportedResourceError as exc:
        logger.debug("ignoring timestamp: %s", exc)
        return current
    if ts is None:
        return current
    return ts if current is None or ts > current else current


def last_updated(obj: dict[str, Any]) -> datetime | None:
    """Latest timestamp found anywhere in the object's metadata or status."""
    metadata = obj.get("metadata") if isinstance(obj.get("metadata"), dict) else {}
    latest = _max_time(None, metadata.get("creationTimestamp"))
    latest = _max_time(latest, metadata.get("deletionTimestamp"))

    annotations = metadata.get("annotations")
    if isinstance(annotations, dict):
        latest = _max_time(latest, annotations.get(LAST_APPLIED_ANNOTATION))

    managed_fields = metadata.get("managedFields")
    for managed in managed_fields if isinstance(managed_fields, list) else []:
        if isinstance(managed, dict) and managed.get("operation") == "Update":
            latest = _max_time(latest, managed.get("time"))

    status = obj.get("status")
    if not isinstance(status, dict):
        return latest

    for path in STATUS_TIME_PATHS:
        try:
            value = nested(status, *path)
        except ResourceConversionError:
            continue
        latest = _max_time(latest, value)

    conditions = status.get("conditions")
    for cond in conditions if isinstance(conditions, list) else []:
        if isinstance(cond, dict):
            for key in CONDITION_TIME_FIELDS:
                latest = _max_time(latest, cond.get(key))

    container_statuses = status.get("containerStatuses")
    for cs in container_statuses if isinstance(container_statuses, list) else []:
        if not isinstance(cs, dict):
            continue
        for path in CONTAINER_TIME_PATHS:
            try:
                value = nested(cs, *path)
            except ResourceConversionError:
                continue
            latest = _max_time(latest, value)
    return latest


def _deletion_time(obj: dict[str, Any]) -> datetime | None:
    try:
        return parse_time(nested(obj, "metadata", "deletionTimestamp"))
    except HealthCheckError as exc:
        logger.debug("ignoring deletionTimestamp: %s", exc)
        return None


def _builtin_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus | None:
    group, version, kind = gvk(obj)
    check = checks.lookup(group, kind)
    if check is None:
        return None
    if not check.supports(version):
        api_version = obj.get("apiVersion")
        return HealthStatus(
            health=Health.UNKNOWN,
            status=StatusCode.UNKNOWN,
            message=f"unsupported {kind} GVK: {api_version}/{kind}",
        )
    logger.debug("evaluating %s/%s with %s", group or "core", kind, check.func.__name__)
    return check.func(obj, ctx)


def _refine(health: HealthStatus | None, obj: dict[str, Any]) -> HealthStatus | None:
    generic, matched = get_generic_health(obj)
    if generic is None:
        return health
    if health is None:
        return generic if matched else None
    if not health.status:
        health.status = generic.status
    elif generic.status and StatusCode.is_ambiguous(health.status) and not StatusCode.is_ambiguous(generic.status):
        health.status = generic.status
    if not health.message:
        health.message = generic.message
    return health


def evaluate_with_error(
    resource: Any,
    override: OverridePort | None = None,
    settings: HealthSettings | None = None,
) -> tuple[HealthStatus, HealthCheckError | None]:
    """Evaluate ``resource`` and return ``(status, error)``.

    ``error`` is set for conversion failures and override failures; the
    status is still the best verdict that could be reached.
    """
    try:
        obj = to_document(resource)
    except ResourceConversionError as exc:
        return HealthStatus(health=Health.UNKNOWN, status=StatusCode.UNKNOWN, message=str(exc)), exc

    ctx = EvaluationContext.create(settings)
    error: HealthCheckError | None = None

    deleted = _deletion_time(obj)
    if deleted is not None and ctx.since(deleted) > TERMINATION_STALLED:
        stalled_for = truncate_to(ctx.since(deleted), timedelta(hours=1))
        return HealthStatus(
            health=Health.WARNING,
            status=StatusCode.TERMINATING_STALLED,
            message=f"terminating for {short_human_duration(stalled_for)}",
            last_updated=last_updated(obj),
        ), None

    health: HealthStatus | None
    try:
        health = _builtin_health(obj, ctx)
    except UnsupportedResourceError as exc:
        logger.debug("unsupported resource: %s", exc)
        health = HealthStatus(health=Health.UNKNOWN, status=StatusCode.UNKNOWN, message=str(exc))
    except ResourceConversionError as exc:
        health = HealthStatus(health=Health.UNKNOWN, status=StatusCode.UNKNOWN, message=str(exc))
        error = exc

    if override is not None and (health is None or StatusCode.is_ambiguous(health.status)):
        try:
            overridden = override.get_resource_health(obj)
        except Exception as exc:
            failure = OverrideError(f"health override failed: {exc}")
            failure.__cause__ = exc
            return HealthStatus(
                health=Health.UNKNOWN,
                status=StatusCode.UNKNOWN,
                message=str(exc),
                last_updated=last_updated(obj),
            ), failure
        if overridden is not None:
            health = overridden

    if health is None or not health.status or StatusCode.is_ambiguous(health.status):
        logger.debug("refining %s/%s with the condition table", obj.get("apiVersion"), obj.get("kind"))
        health = _refine(health, obj)

    if health is None:
        health = HealthStatus(ready=True, health=Health.UNKNOWN, status=StatusCode.UNKNOWN)
    if deleted is not None:
        health.status = StatusCode.TERMINATING
        health.ready = False
    health.last_updated = last_updated(obj)
    return health, error


def evaluate(
    resource: Any,
    override: OverridePort | None = None,
    settings: HealthSettings | None = None,
) -> HealthStatus:
    """Evaluate ``resource``; conversion errors are raised with ``.status`` attached."""
    status, error = evaluate_with_error(resource, override=override, settings=settings)
    if error is not None:
        error.status = status
        raise error
    return status


def get_health_by_config_type(
    config_type: str,
    obj: dict[str, Any],
    *states: str,
    override: OverridePort | None = None,
    settings: HealthSettings | None = None,
) -> HealthStatus:
    """Route a document to its classifier by the class prefix of ``config_type``.

    ``AWS::EC2::Instance`` goes to the AWS tables, ``Kubernetes::Pod`` to
    ``evaluate``. Never raises.
    """
    config_class = config_type.split("::", 1)[0].lower()
    logger.debug("routing %s to the %s classifier", config_type, config_class or "default")

    if config_class == "aws":
        return get_aws_health(config_type, obj, *states)
    if config_class == "azure":
        return get_azure_health(config_type, obj, EvaluationContext.create(settings))
    if config_class == "gcp":
        return get_gcp_health(config_type, obj)
    if config_class == "mongo":
        return get_mongo_health(obj)
    if config_class in KUBERNETES_CONFIG_CLASSES:
        status, error = evaluate_with_error(obj, override=override, settings=settings)
        if error is not None:
            return HealthStatus(
                status=StatusCode.HEALTH_PARSE_ERROR,
                message=truncate(str(error), PARSE_ERROR_MESSAGE_LIMIT),
            )
        return status

    if states:
        return get_health_from_status_name(states[0])
    status = find_status_field(obj)
    if status:
        return get_health_from_status_name(status)
    return HealthStatus(health=Health.UNKNOWN)
