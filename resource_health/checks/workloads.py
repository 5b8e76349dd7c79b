# SPDX-License-Identifier: MIT

"""Replica-based workloads: Deployment, ReplicaSet, StatefulSet, DaemonSet."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from resource_health.documents import creation_timestamp, nested_bool, nested_int, nested_maps, nested_str
from resource_health.models import GenericStatus, Health, HealthStatus, StatusCode
from resource_health.settings import EvaluationContext
from resource_health.utils import start_deadline, truncate_to


@dataclass
class ReplicaStatus:
    obj: dict[str, Any]
    desired: int
    replicas: int
    ready: int
    updated: int
    containers: list[dict[str, Any]] = field(default_factory=list)
    on_delete: bool = False

    def __str__(self) -> str:
        s = f"{self.ready}/{self.desired} ready"
        if self.replicas != self.updated:
            s += f", {self.replicas - self.updated} updating"
        if self.replicas > self.desired:
            s += f", {self.replicas - self.desired} terminating"
        return s


def _generation_observed(obj: dict[str, Any]) -> bool:
    generation = nested_int(obj, "metadata", "generation", default=-1)
    if generation < 0:
        return True
    return nested_int(obj, "status", "observedGeneration") >= generation


def _template_containers(obj: dict[str, Any]) -> list[dict[str, Any]]:
    return nested_maps(obj, "spec", "template", "spec", "containers")


def replica_health(rs: ReplicaStatus, ctx: EvaluationContext) -> HealthStatus:
    hs = HealthStatus(message=str(rs))
    gs = GenericStatus.from_document(rs.obj)

    created = creation_timestamp(rs.obj)
    is_starting = False
    if created is not None:
        age = truncate_to(abs(ctx.since(created)), timedelta(minutes=1))
        is_starting = age < start_deadline(rs.containers)

    if rs.desired == 0 and rs.replicas == 0:
        hs.ready = True
        hs.status = StatusCode.SCALED_TO_ZERO
        hs.health = Health.UNKNOWN
        return hs

    failure = gs.find_condition("ReplicaFailure")
    if failure is not None and failure.is_true:
        hs.ready = True
        hs.status = StatusCode.FAILED_CREATE
        hs.health = Health.UNHEALTHY
        hs.message = failure.message
        return hs

    progressing = gs.find_condition("Progressing")
    deadline_exceeded = (
        not is_starting and progressing is not None and progressing.reason == "ProgressDeadlineExceeded"
    )
    updated = rs.desired if rs.on_delete else rs.updated
    if progressing is not None:
        hs.ready = progressing.is_true and progressing.reason != "ReplicaSetUpdated"
    else:
        hs.ready = _generation_observed(rs.obj) and rs.ready == rs.desired and updated == rs.desired

    if rs.ready >= rs.desired:
        hs.health = Health.HEALTHY
    elif rs.ready > 0:
        hs.health = Health.WARNING
    else:
        hs.health = Health.UNHEALTHY

    if rs.replicas == 0:
        if deadline_exceeded:
            hs.status = StatusCode.FAILED_CREATE
            hs.health = Health.UNHEALTHY
        else:
            hs.status = StatusCode.PENDING
            hs.health = Health.UNKNOWN
    elif rs.ready == 0 and is_starting:
        hs.status = StatusCode.STARTING
    elif rs.ready == 0:
        hs.status = StatusCode.CRASH_LOOP_BACKOFF

    if deadline_exceeded:
        hs.status = StatusCode.ROLLOUT_FAILED
        hs.health = hs.health.worst(Health.WARNING)
    elif rs.desired == 0 and rs.replicas > 0:
        hs.status = StatusCode.SCALING_DOWN
    elif rs.ready == rs.desired and rs.desired == updated and rs.replicas == rs.desired:
        hs.status = StatusCode.RUNNING
    elif not is_starting and rs.desired != updated:
        hs.status = StatusCode.ROLLING_OUT
    elif rs.replicas > rs.desired:
        hs.status = StatusCode.SCALING_DOWN
    elif rs.replicas < rs.desired:
        hs.status = StatusCode.SCALING_UP

    if is_starting and rs.ready == 0 and hs.health == Health.UNHEALTHY:
        hs.health = Health.UNKNOWN

    return hs


def deployment_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus:
    hs = replica_health(ReplicaStatus(
        obj=obj,
        desired=nested_int(obj, "spec", "replicas", default=1),
        replicas=nested_int(obj, "status", "replicas"),
        ready=nested_int(obj, "status", "readyReplicas"),
        updated=nested_int(obj, "status", "updatedReplicas"),
        containers=_template_containers(obj),
    ), ctx)
    if nested_bool(obj, "spec", "paused"):
        hs.status = StatusCode.SUSPENDED
        hs.ready = False
    return hs


def replicaset_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus:
    replicas = nested_int(obj, "status", "replicas")
    return replica_health(ReplicaStatus(
        obj=obj,
        desired=nested_int(obj, "spec", "replicas", default=1),
        replicas=replicas,
        ready=nested_int(obj, "status", "readyReplicas"),
        # every pod of a ReplicaSet runs its one template
        updated=replicas,
        containers=_template_containers(obj),
    ), ctx)


def statefulset_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus:
    return replica_health(ReplicaStatus(
        obj=obj,
        desired=nested_int(obj, "spec", "replicas", default=1),
        replicas=nested_int(obj, "status", "replicas"),
        ready=nested_int(obj, "status", "readyReplicas"),
        updated=nested_int(obj, "status", "updatedReplicas"),
        containers=_template_containers(obj),
        on_delete=nested_str(obj, "spec", "updateStrategy", "type") == "OnDelete",
    ), ctx)


def daemonset_health(obj: dict[str, Any], ctx: EvaluationContext) -> HealthStatus:
    return replica_health(ReplicaStatus(
        obj=obj,
        desired=nested_int(obj, "status", "desiredNumberScheduled"),
        replicas=nested_int(obj, "status", "currentNumberScheduled"),
        ready=nested_int(obj, "status", "numberReady"),
        updated=nested_int(obj, "status", "updatedNumberScheduled"),
        containers=_template_containers(obj),
        on_delete=nested_str(obj, "spec", "updateStrategy", "type") == "OnDelete",
    ), ctx)
