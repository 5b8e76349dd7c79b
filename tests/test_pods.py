# SPDX-License-Identifier: MIT

import pytest

from resource_health.checks.pods import is_container_error, pod_health
from resource_health.models import Health

from .helpers import ago

pytestmark = pytest.mark.unit


def make_pod(phase="Running", ready=True, created=None, containers=None, **status):
    conditions = status.pop("conditions", [])
    if ready is not None:
        conditions = conditions + [{"type": "Ready", "status": "True" if ready else "False"}]
    return {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {"name": "web", "namespace": "default", "creationTimestamp": created or ago(days=7)},
        "spec": {"containers": [{"name": "app", "image": "nginx"}]},
        "status": {"phase": phase, "conditions": conditions, "containerStatuses": containers or [], **status},
    }


def waiting(reason, message="", restarts=0):
    return {"name": "app", "restartCount": restarts, "state": {"waiting": {"reason": reason, "message": message}}}


def terminated(reason, finished, exit_code=1, restarts=1, message=""):
    return {
        "name": "app",
        "restartCount": restarts,
        "state": {"running": {"startedAt": ago(minutes=1)}},
        "lastState": {"terminated": {
            "reason": reason, "exitCode": exit_code, "finishedAt": finished, "message": message,
        }},
    }


@pytest.mark.parametrize("reason,expected", [
    ("ErrImagePull", True),
    ("CreateContainerConfigError", True),
    ("CrashLoopBackOff", True),
    ("ContainerCreating", False),
    ("PodInitializing", False),
])
def test_is_container_error(reason, expected):
    assert is_container_error(reason) is expected


def test_running_and_ready(ctx):
    hs = pod_health(make_pod(), ctx)
    assert (hs.health, hs.status, hs.ready) == (Health.HEALTHY, "Running", True)


def test_crash_loop(ctx):
    pod = make_pod(ready=False, containers=[waiting("CrashLoopBackOff", "back-off 5m0s restarting failed container", 5)])
    hs = pod_health(pod, ctx)
    assert hs.health == Health.UNHEALTHY
    assert hs.status == "CrashLoopBackOff"
    assert hs.message == "back-off 5m0s restarting failed container"
    assert hs.ready is False


def test_pending_within_start_deadline_is_starting(ctx):
    pod = make_pod(phase="Pending", ready=None, created=ago(minutes=2), containers=[waiting("ContainerCreating")])
    hs = pod_health(pod, ctx)
    assert hs.health == Health.UNKNOWN
    assert hs.status == "Starting"
    assert hs.message == ""


def test_error_within_start_deadline_keeps_reason_in_message(ctx):
    pod = make_pod(
        phase="Pending", ready=False, created=ago(minutes=2),
        containers=[waiting("ImagePullBackOff", "Back-off pulling image")],
    )
    hs = pod_health(pod, ctx)
    assert hs.health == Health.UNKNOWN
    assert hs.status == "Starting"
    assert hs.message == "ImagePullBackOff, Back-off pulling image"


def test_pending_past_start_deadline_is_unhealthy(ctx):
    pod = make_pod(phase="Pending", ready=None, created=ago(minutes=30), containers=[waiting("ContainerCreating")])
    hs = pod_health(pod, ctx)
    assert hs.health == Health.UNHEALTHY
    assert hs.status == "Pending"


def test_readiness_probe_extends_start_deadline(ctx):
    pod = make_pod(phase="Pending", ready=None, created=ago(minutes=11))
    pod["spec"]["containers"][0]["readinessProbe"] = {"initialDelaySeconds": 900, "periodSeconds": 30}
    assert pod_health(pod, ctx).status == "Starting"


def test_recent_oom_kill_is_unhealthy_even_while_starting(ctx):
    pod = make_pod(ready=False, created=ago(minutes=2), containers=[terminated("OOMKilled", ago(minutes=5), 137)])
    hs = pod_health(pod, ctx)
    assert hs.health == Health.UNHEALTHY
    assert hs.status == "OOMKilled"
    assert hs.message == 'container "app" terminated with exit code 137, app has restarted 1 time(s)'


def test_termination_within_a_day_is_a_warning(ctx):
    pod = make_pod(containers=[terminated("Error", ago(hours=3), message="panic: nil map")])
    hs = pod_health(pod, ctx)
    assert hs.health == Health.WARNING
    assert hs.status == "Error"
    assert hs.message == "panic: nil map, app has restarted 1 time(s)"
    assert hs.ready is True


def test_old_termination_is_ignored(ctx):
    hs = pod_health(make_pod(containers=[terminated("Error", ago(days=2))]), ctx)
    assert (hs.health, hs.status) == (Health.HEALTHY, "Running")


def test_clean_completion_is_ignored(ctx):
    hs = pod_health(make_pod(containers=[terminated("Completed", ago(minutes=5), exit_code=0)]), ctx)
    assert (hs.health, hs.status) == (Health.HEALTHY, "Running")


def test_evicted(ctx):
    pod = make_pod(phase="Failed", ready=None, reason="Evicted", message="The node was low on resource: memory.")
    hs = pod_health(pod, ctx)
    assert (hs.health, hs.status, hs.ready) == (Health.WARNING, "Evicted", True)
    assert hs.message == "The node was low on resource: memory."


def test_unschedulable(ctx):
    pod = make_pod(phase="Pending", ready=None, conditions=[{
        "type": "PodScheduled", "status": "False", "reason": "Unschedulable",
        "message": "0/3 nodes are available: 3 Insufficient cpu.",
    }])
    hs = pod_health(pod, ctx)
    assert (hs.health, hs.status, hs.ready) == (Health.UNHEALTHY, "Unschedulable", False)
    assert hs.message == "0/3 nodes are available: 3 Insufficient cpu."


def test_succeeded(ctx):
    hs = pod_health(make_pod(phase="Succeeded", ready=False), ctx)
    assert (hs.health, hs.status, hs.ready) == (Health.HEALTHY, "Completed", True)


@pytest.mark.parametrize("state,message", [
    ({"reason": "Error", "exitCode": 2}, 'container "app" failed with exit code 2'),
    ({"reason": "OOMKilled", "exitCode": 137}, "OOMKilled"),
    ({"reason": "Error", "exitCode": 1, "message": "config missing"}, "config missing"),
])
def test_failed_message_from_containers(ctx, state, message):
    pod = make_pod(phase="Failed", ready=False, containers=[{"name": "app", "state": {"terminated": state}}])
    hs = pod_health(pod, ctx)
    assert (hs.health, hs.status, hs.ready) == (Health.UNHEALTHY, "Failed", True)
    assert hs.message == message


def test_recently_terminating(ctx):
    pod = make_pod()
    pod["metadata"]["deletionTimestamp"] = ago(minutes=5)
    hs = pod_health(pod, ctx)
    assert (hs.health, hs.status, hs.message) == (Health.UNKNOWN, "Terminating", "")


def test_unknown_phase(ctx):
    hs = pod_health(make_pod(phase="Unknown", ready=None), ctx)
    assert (hs.health, hs.status) == (Health.UNKNOWN, "Unknown")
