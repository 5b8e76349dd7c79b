# SPDX-License-Identifier: MIT

from types import SimpleNamespace
from unittest import mock

import pytest
from kubernetes.client import V1ObjectMeta, V1Pod, V1PodStatus
from kubernetes.client.exceptions import ApiException

from resource_health.collector import DEFAULT_KINDS, collect_resources

pytestmark = pytest.mark.unit

API_CLASSES = ("CoreV1Api", "AppsV1Api", "BatchV1Api", "NetworkingV1Api", "AutoscalingV2Api")


@pytest.fixture
def apis():
    patches = {name: mock.patch(f"kubernetes.client.{name}") for name in API_CLASSES}
    mocks = {name: p.start().return_value for name, p in patches.items()}
    yield mocks
    for p in patches.values():
        p.stop()


def _pod(name):
    return V1Pod(metadata=V1ObjectMeta(name=name, namespace="default"), status=V1PodStatus(phase="Running"))


def test_namespaced_listing(apis):
    apis["CoreV1Api"].list_namespaced_pod.return_value = SimpleNamespace(items=[_pod("web"), _pod("worker")])

    docs = collect_resources(object(), namespace="default", kinds=["Pod"])

    apis["CoreV1Api"].list_namespaced_pod.assert_called_once_with(namespace="default")
    assert [d["metadata"]["name"] for d in docs] == ["web", "worker"]
    assert docs[0]["apiVersion"] == "v1"
    assert docs[0]["kind"] == "Pod"
    assert docs[0]["status"] == {"phase": "Running"}


def test_all_namespaces(apis):
    apis["AppsV1Api"].list_deployment_for_all_namespaces.return_value = SimpleNamespace(items=[{"metadata": {"name": "web"}}])

    docs = collect_resources(object(), kinds=["Deployment"])

    apis["AppsV1Api"].list_deployment_for_all_namespaces.assert_called_once_with()
    assert docs == [{"metadata": {"name": "web"}, "apiVersion": "apps/v1", "kind": "Deployment"}]


def test_failed_call_is_skipped(apis):
    apis["CoreV1Api"].list_node.side_effect = ApiException(status=403, reason="Forbidden")
    apis["CoreV1Api"].list_namespace.return_value = SimpleNamespace(items=[{"metadata": {"name": "default"}}])

    docs = collect_resources(object(), kinds=["Node", "Namespace"])

    assert [d["kind"] for d in docs] == ["Namespace"]


def test_unsupported_kind(apis):
    with pytest.raises(ValueError, match="cannot collect Widget"):
        collect_resources(object(), kinds=["Widget"])


def test_default_kinds_are_all_listable(apis):
    docs = collect_resources(object())
    assert docs == []
    apis["CoreV1Api"].list_pod_for_all_namespaces.assert_called_once_with()
    assert len(DEFAULT_KINDS) == 13
