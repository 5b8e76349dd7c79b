# SPDX-License-Identifier: MIT

"""Read-only listing of cluster resources for evaluation.

Every call is a list operation. Items returned by list calls carry no
``apiVersion``/``kind`` of their own, so both are stamped onto each
document here.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from resource_health.documents import to_document

logger = logging.getLogger("resource_health.collector")

DEFAULT_KINDS = [
    "Node", "Namespace", "Pod", "Service", "PersistentVolumeClaim",
    "Deployment", "ReplicaSet", "StatefulSet", "DaemonSet",
    "Job", "CronJob", "Ingress", "HorizontalPodAutoscaler",
]


def _safe_list(func: Callable[..., Any], **kwargs: Any) -> list[Any]:
    try:
        result = func(**kwargs)
        return result.items if hasattr(result, "items") else []
    except Exception as exc:
        logger.debug("API call %s failed: %s", getattr(func, "__name__", "?"), exc)
        return []


def _list_calls(api_client, namespace: str | None) -> dict[str, tuple[str, Callable[..., Any], dict[str, Any]]]:
    from kubernetes.client import (
        AppsV1Api, AutoscalingV2Api, BatchV1Api, CoreV1Api, NetworkingV1Api,
    )

    core = CoreV1Api(api_client)
    apps = AppsV1Api(api_client)
    batch = BatchV1Api(api_client)
    net = NetworkingV1Api(api_client)
    autoscaling = AutoscalingV2Api(api_client)

    ns_args: dict[str, Any] = {"namespace": namespace} if namespace else {}

    def _ns_call(namespaced_fn, all_ns_fn):
        return namespaced_fn if namespace else all_ns_fn

    return {
        "Node": ("v1", core.list_node, {}),
        "Namespace": ("v1", core.list_namespace, {}),
        "Pod": ("v1", _ns_call(core.list_namespaced_pod, core.list_pod_for_all_namespaces), ns_args),
        "Service": ("v1", _ns_call(core.list_namespaced_service, core.list_service_for_all_namespaces), ns_args),
        "PersistentVolumeClaim": (
            "v1",
            _ns_call(core.list_namespaced_persistent_volume_claim, core.list_persistent_volume_claim_for_all_namespaces),
            ns_args,
        ),
        "Deployment": ("apps/v1", _ns_call(apps.list_namespaced_deployment, apps.list_deployment_for_all_namespaces), ns_args),
        "ReplicaSet": ("apps/v1", _ns_call(apps.list_namespaced_replica_set, apps.list_replica_set_for_all_namespaces), ns_args),
        "StatefulSet": ("apps/v1", _ns_call(apps.list_namespaced_stateful_set, apps.list_stateful_set_for_all_namespaces), ns_args),
        "DaemonSet": ("apps/v1", _ns_call(apps.list_namespaced_daemon_set, apps.list_daemon_set_for_all_namespaces), ns_args),
        "Job": ("batch/v1", _ns_call(batch.list_namespaced_job, batch.list_job_for_all_namespaces), ns_args),
        "CronJob": ("batch/v1", _ns_call(batch.list_namespaced_cron_job, batch.list_cron_job_for_all_namespaces), ns_args),
        "Ingress": (
            "networking.k8s.io/v1",
            _ns_call(net.list_namespaced_ingress, net.list_ingress_for_all_namespaces),
            ns_args,
        ),
        "HorizontalPodAutoscaler": (
            "autoscaling/v2",
            _ns_call(
                autoscaling.list_namespaced_horizontal_pod_autoscaler,
                autoscaling.list_horizontal_pod_autoscaler_for_all_namespaces,
            ),
            ns_args,
        ),
    }


def collect_resources(
    api_client, namespace: str | None = None, kinds: list[str] | None = None,
) -> list[dict[str, Any]]:
    """List ``kinds`` (default: every built-in core kind) as plain documents."""
    calls = _list_calls(api_client, namespace)
    documents: list[dict[str, Any]] = []
    for kind in kinds or DEFAULT_KINDS:
        if kind not in calls:
            raise ValueError(f"cannot collect {kind}; supported kinds: {', '.join(DEFAULT_KINDS)}")
        api_version, api_fn, api_args = calls[kind]
        for item in _safe_list(api_fn, **api_args):
            doc = to_document(item)
            doc["apiVersion"] = api_version
            doc["kind"] = kind
            documents.append(doc)
    logger.debug("collected %d resources", len(documents))
    return documents
