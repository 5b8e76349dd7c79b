#!/usr/bin/python
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MIT

"""Resource health classification module for Ansible.

Classifies Kubernetes objects, or configs scraped from AWS, Azure, GCP and
MongoDB, with the resource_health engine. Documents are either passed in
through ``resources`` or listed read-only from the cluster in the current
kubeconfig context. Nothing is written to the cluster.
"""

from __future__ import annotations

DOCUMENTATION = r"""
---
module: resource_health_check
short_description: Classify the health of Kubernetes and cloud resources
version_added: "1.0.0"
description:
  - Evaluates each resource document and reports ready, health, status
    and message, the same verdict the C(resource-health) CLI prints.
  - When O(resources) is omitted the module lists O(kinds) from the
    cluster using kubeconfig. All API calls are list operations.
  - Thresholds for certificate expiry and renewal can be tuned per run.
options:
  resources:
    description: Resource documents to classify. Omit to read from the cluster.
    type: list
    elements: dict
  config_type:
    description:
      - Classify the documents as scraped configs of this type, for example
        C(AWS::EC2::Instance) or C(Azure::AppRegistration::ClientSecret).
      - Omit for Kubernetes objects.
    type: str
  fail_on:
    description: Fail the task when the overall health reaches this level.
    type: str
    default: none
    choices: [none, warning, unhealthy]
  expiry_grace_period:
    description: Warn about certificates expiring within this duration (e.g. C(72h)).
    type: str
  renewal_grace_period:
    description: Warn about certificates whose renewal is overdue by this duration.
    type: str
  kubeconfig:
    description: Path to the kubeconfig file, used when O(resources) is omitted.
    type: path
    default: ~/.kube/config
  context:
    description: Kubeconfig context to use. Defaults to current context.
    type: str
  namespace:
    description: Limit listing to a single namespace. Omit for all namespaces.
    type: str
  kinds:
    description: Kinds to list from the cluster. Defaults to every built-in core kind.
    type: list
    elements: str
requirements:
  - resource_health (Python package)
  - kubernetes (Python package, only when reading from the cluster)
author:
  - resource-health contributors
"""

EXAMPLES = r"""
- name: Classify every workload in the current context
  resource_health_check:
  register: health

- name: Check a single namespace and fail on unhealthy resources
  resource_health_check:
    namespace: my-app
    kinds: [Deployment, Pod]
    fail_on: unhealthy

- name: Classify an EC2 instance scraped elsewhere
  resource_health_check:
    config_type: AWS::EC2::Instance
    resources:
      - InstanceId: i-0123456789abcdef0
        State:
          Name: running

- name: Warn three days before certificates expire
  resource_health_check:
    resources: "{{ certificates.resources }}"
    expiry_grace_period: 72h
  register: health
  failed_when: health.summary.warning > 0
"""

RETURN = r"""
results:
  description: One verdict per resource, in input order.
  type: list
  returned: always
  elements: dict
  sample:
    - kind: "Deployment"
      namespace: "default"
      name: "web"
      ready: true
      health: "healthy"
      status: "Running"
      message: "3/3 ready"
summary:
  description: Number of resources per health value.
  type: dict
  returned: always
  sample:
    total: 4
    healthy: 2
    warning: 1
    unhealthy: 1
    unknown: 0
overall_health:
  description: Worst health across all resources, C(unknown) when empty.
  type: str
  returned: always
"""

import logging
from typing import Any

from resource_health import (
    Health,
    HealthSettings,
    evaluate_with_error,
    get_health_by_config_type,
)
from resource_health.models import worst
from resource_health.settings import PROPERTY_CERT_EXPIRY, PROPERTY_CERT_RENEWAL

logger = logging.getLogger("resource_health_check")

FAIL_ON = {"none": None, "warning": Health.WARNING, "unhealthy": Health.UNHEALTHY}


def _identity(doc: dict[str, Any]) -> dict[str, str]:
    meta = doc.get("metadata") if isinstance(doc.get("metadata"), dict) else {}
    identity = {"kind": str(doc.get("kind") or "")}
    name = meta.get("name") or doc.get("name") or doc.get("InstanceId") or ""
    if meta.get("namespace"):
        identity["namespace"] = str(meta["namespace"])
    identity["name"] = str(name)
    return identity


def build_settings(expiry_grace_period: str | None, renewal_grace_period: str | None) -> HealthSettings:
    properties = {}
    if expiry_grace_period:
        properties[PROPERTY_CERT_EXPIRY] = expiry_grace_period
    if renewal_grace_period:
        properties[PROPERTY_CERT_RENEWAL] = renewal_grace_period
    return HealthSettings.from_properties(properties)


def evaluate_resources(
    resources: list[dict[str, Any]],
    config_type: str | None = None,
    settings: HealthSettings | None = None,
) -> dict[str, Any]:
    """Classify every document and summarise the verdicts."""
    results = []
    healths = []
    for doc in resources:
        entry = _identity(doc)
        if config_type:
            status = get_health_by_config_type(config_type, doc, settings=settings)
        else:
            status, error = evaluate_with_error(doc, settings=settings)
            if error is not None:
                logger.debug("evaluation error for %s: %s", entry, error)
                entry["error"] = str(error)
        entry.update(status.to_dict())
        results.append(entry)
        healths.append(status.health)

    summary = {"total": len(results)}
    for health in Health:
        summary[health.value] = sum(1 for h in healths if h == health)

    return {
        "results": results,
        "summary": summary,
        "overall_health": worst(*healths).value,
    }


def threshold_crossed(overall_health: str, fail_on: str) -> bool:
    threshold = FAIL_ON[fail_on]
    if threshold is None:
        return False
    return Health(overall_health).is_worse_than(threshold)


# =====================================================================
# Ansible Module Entry Point
# =====================================================================

def run_module():
    from ansible.module_utils.basic import AnsibleModule

    module = AnsibleModule(
        argument_spec=dict(
            resources=dict(type="list", elements="dict", default=None),
            config_type=dict(type="str", default=None),
            fail_on=dict(type="str", default="none", choices=["none", "warning", "unhealthy"]),
            expiry_grace_period=dict(type="str", default=None),
            renewal_grace_period=dict(type="str", default=None),
            kubeconfig=dict(type="path", default="~/.kube/config"),
            context=dict(type="str", default=None),
            namespace=dict(type="str", default=None),
            kinds=dict(type="list", elements="str", default=None),
        ),
        supports_check_mode=True,
    )

    try:
        settings = build_settings(module.params["expiry_grace_period"], module.params["renewal_grace_period"])
    except ValueError as e:
        module.fail_json(msg=f"Invalid grace period: {e}")
        return

    resources = module.params["resources"]
    if resources is None:
        # Verify kubernetes package is available
        try:
            from kubernetes import client, config
            from kubernetes.config.config_exception import ConfigException
        except ImportError:
            module.fail_json(msg="The 'kubernetes' Python package is required. Install with: pip install kubernetes")
            return

        from resource_health.collector import collect_resources

        try:
            try:
                config.load_kube_config(config_file=module.params["kubeconfig"], context=module.params["context"])
            except ConfigException:
                config.load_incluster_config()
            api_client = client.ApiClient()
        except Exception as e:
            module.fail_json(msg=f"Failed to connect to Kubernetes cluster: {e}")
            return

        try:
            resources = collect_resources(api_client, namespace=module.params["namespace"], kinds=module.params["kinds"])
        except ValueError as e:
            module.fail_json(msg=str(e))
            return

    report = evaluate_resources(resources, config_type=module.params["config_type"], settings=settings)

    if threshold_crossed(report["overall_health"], module.params["fail_on"]):
        module.fail_json(msg=f"Overall health is {report['overall_health']}", **report)
        return

    module.exit_json(changed=False, **report)


def main():
    run_module()


if __name__ == "__main__":
    main()
