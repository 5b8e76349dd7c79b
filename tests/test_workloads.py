# SPDX-License-Identifier: MIT

import pytest

from resource_health.checks.workloads import (
    daemonset_health,
    deployment_health,
    replicaset_health,
    statefulset_health,
)
from resource_health.models import Health

from .helpers import ago

pytestmark = pytest.mark.unit


def workload(kind, desired=3, replicas=3, ready=3, updated=3, created=None, conditions=None, **spec):
    return {
        "apiVersion": "apps/v1",
        "kind": kind,
        "metadata": {"name": "web", "namespace": "default", "creationTimestamp": created or ago(days=1)},
        "spec": {"replicas": desired, "template": {"spec": {"containers": [{"name": "app"}]}}, **spec},
        "status": {
            "replicas": replicas,
            "readyReplicas": ready,
            "updatedReplicas": updated,
            "conditions": conditions or [],
        },
    }


def progressing(status, reason):
    return {"type": "Progressing", "status": status, "reason": reason}


class TestDeployment:
    def test_running(self, ctx):
        hs = deployment_health(
            workload("Deployment", conditions=[progressing("True", "NewReplicaSetAvailable")]), ctx,
        )
        assert (hs.health, hs.status, hs.ready, hs.message) == (Health.HEALTHY, "Running", True, "3/3 ready")

    def test_rolling_out(self, ctx):
        hs = deployment_health(workload(
            "Deployment", replicas=4, updated=2, conditions=[progressing("True", "ReplicaSetUpdated")],
        ), ctx)
        assert hs.status == "Rolling Out"
        assert hs.health == Health.HEALTHY
        assert hs.ready is False
        assert hs.message == "3/3 ready, 2 updating, 1 terminating"

    def test_progress_deadline_exceeded(self, ctx):
        hs = deployment_health(workload(
            "Deployment", ready=1, conditions=[progressing("False", "ProgressDeadlineExceeded")],
        ), ctx)
        assert (hs.health, hs.status, hs.ready) == (Health.WARNING, "Rollout Failed", False)

    def test_scaling_down_to_zero(self, ctx):
        hs = deployment_health(workload("Deployment", desired=0, replicas=2, ready=2, updated=0), ctx)
        assert hs.status == "Scaling Down"
        assert hs.health == Health.HEALTHY

    def test_paused_is_suspended(self, ctx):
        hs = deployment_health(workload("Deployment", paused=True), ctx)
        assert hs.status == "Suspended"
        assert hs.ready is False

    def test_no_ready_replicas_while_starting(self, ctx):
        hs = deployment_health(workload("Deployment", desired=2, replicas=2, ready=0, updated=2, created=ago(minutes=2)), ctx)
        assert (hs.health, hs.status) == (Health.UNKNOWN, "Starting")

    def test_no_ready_replicas_after_start_deadline(self, ctx):
        hs = deployment_health(workload("Deployment", desired=2, replicas=2, ready=0, updated=2), ctx)
        assert (hs.health, hs.status) == (Health.UNHEALTHY, "CrashLoopBackOff")

    def test_replicas_default_to_one(self, ctx):
        obj = workload("Deployment", replicas=1, ready=1, updated=1)
        del obj["spec"]["replicas"]
        hs = deployment_health(obj, ctx)
        assert hs.message == "1/1 ready"
        assert hs.status == "Running"

    def test_unobserved_generation_is_not_ready(self, ctx):
        obj = workload("Deployment")
        obj["metadata"]["generation"] = 4
        obj["status"]["observedGeneration"] = 3
        assert deployment_health(obj, ctx).ready is False


class TestReplicaSet:
    def test_failed_create(self, ctx):
        hs = replicaset_health(workload("ReplicaSet", replicas=0, ready=0, conditions=[{
            "type": "ReplicaFailure", "status": "True", "reason": "FailedCreate",
            "message": 'pods "web-1" is forbidden: exceeded quota',
        }]), ctx)
        assert (hs.health, hs.status, hs.ready) == (Health.UNHEALTHY, "Failed Create", True)
        assert hs.message == 'pods "web-1" is forbidden: exceeded quota'

    def test_partially_ready(self, ctx):
        hs = replicaset_health(workload("ReplicaSet", desired=2, replicas=2, ready=1), ctx)
        assert hs.health == Health.WARNING
        assert hs.message == "1/2 ready"
        assert hs.ready is False


class TestStatefulSet:
    def test_on_delete_ignores_updated_count(self, ctx):
        hs = statefulset_health(workload(
            "StatefulSet", desired=3, replicas=2, ready=2, updated=0, updateStrategy={"type": "OnDelete"},
        ), ctx)
        assert hs.status == "Scaling Up"
        assert hs.health == Health.WARNING

    def test_rolling_update_counts_updated(self, ctx):
        hs = statefulset_health(workload("StatefulSet", updated=1), ctx)
        assert hs.status == "Rolling Out"


def test_daemonset_running(ctx):
    obj = {
        "apiVersion": "apps/v1",
        "kind": "DaemonSet",
        "metadata": {"name": "agent", "creationTimestamp": ago(days=3)},
        "spec": {"template": {"spec": {"containers": [{"name": "agent"}]}}},
        "status": {
            "desiredNumberScheduled": 4,
            "currentNumberScheduled": 4,
            "numberReady": 4,
            "updatedNumberScheduled": 4,
        },
    }
    hs = daemonset_health(obj, ctx)
    assert (hs.health, hs.status, hs.ready, hs.message) == (Health.HEALTHY, "Running", True, "4/4 ready")
