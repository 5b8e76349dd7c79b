# SPDX-License-Identifier: MIT

"""Built-in health checks, keyed by API group and kind."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from resource_health.checks import (
    argo,
    cert_manager,
    cluster,
    flanksource,
    flux,
    jobs,
    networking,
    nodes,
    pods,
    storage,
    workloads,
)
from resource_health.models import HealthStatus
from resource_health.settings import EvaluationContext

CheckFunc = Callable[[dict[str, Any], EvaluationContext], "HealthStatus | None"]


@dataclass(frozen=True)
class HealthCheck:
    func: CheckFunc
    # None accepts every version of the group.
    versions: frozenset[str] | None = None

    def supports(self, version: str) -> bool:
        return self.versions is None or version in self.versions


_V1 = frozenset({"v1"})
_HPA_VERSIONS = frozenset({"v1", "v2", "v2beta1", "v2beta2"})
_INGRESS_VERSIONS = frozenset({"v1", "v1beta1"})

_flux = HealthCheck(flux.flux_health)

HEALTH_CHECKS: dict[tuple[str, str], HealthCheck] = {
    ("", "Pod"): HealthCheck(pods.pod_health, _V1),
    ("", "Node"): HealthCheck(nodes.node_health, _V1),
    ("", "Service"): HealthCheck(networking.service_health, _V1),
    ("", "PersistentVolumeClaim"): HealthCheck(storage.pvc_health, _V1),
    ("", "Namespace"): HealthCheck(cluster.namespace_health, _V1),
    ("apps", "Deployment"): HealthCheck(workloads.deployment_health, _V1),
    ("apps", "ReplicaSet"): HealthCheck(workloads.replicaset_health, _V1),
    ("apps", "StatefulSet"): HealthCheck(workloads.statefulset_health, _V1),
    ("apps", "DaemonSet"): HealthCheck(workloads.daemonset_health, _V1),
    ("batch", "Job"): HealthCheck(jobs.job_health, _V1),
    ("batch", "CronJob"): HealthCheck(jobs.cronjob_health, _V1),
    ("networking.k8s.io", "Ingress"): HealthCheck(networking.ingress_health, _INGRESS_VERSIONS),
    ("extensions", "Ingress"): HealthCheck(networking.ingress_health, frozenset({"v1beta1"})),
    ("autoscaling", "HorizontalPodAutoscaler"): HealthCheck(cluster.hpa_health, _HPA_VERSIONS),
    ("cert-manager.io", "Certificate"): HealthCheck(cert_manager.certificate_health),
    ("cert-manager.io", "CertificateRequest"): HealthCheck(cert_manager.certificate_request_health),
    ("kustomize.toolkit.fluxcd.io", "Kustomization"): _flux,
    ("helm.toolkit.fluxcd.io", "HelmRelease"): _flux,
    ("source.toolkit.fluxcd.io", "GitRepository"): _flux,
    ("source.toolkit.fluxcd.io", "HelmRepository"): _flux,
    ("source.toolkit.fluxcd.io", "OCIRepository"): _flux,
    ("source.toolkit.fluxcd.io", "HelmChart"): _flux,
    ("source.toolkit.fluxcd.io", "Bucket"): _flux,
    ("argoproj.io", "Workflow"): HealthCheck(argo.workflow_health),
    ("argoproj.io", "Application"): HealthCheck(argo.application_health),
    ("canaries.flanksource.com", "Canary"): HealthCheck(flanksource.canary_health),
    ("mission-control.flanksource.com", "Notification"): HealthCheck(flanksource.notification_health),
}


def lookup(group: str, kind: str) -> HealthCheck | None:
    return HEALTH_CHECKS.get((group, kind))


def supported_types() -> list[str]:
    """``group/kind`` for every built-in check, core kinds without a group."""
    return sorted(f"{group}/{kind}" if group else kind for group, kind in HEALTH_CHECKS)
