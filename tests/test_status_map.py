# SPDX-License-Identifier: MIT

import pytest

from resource_health.models import GenericStatus, Health
from resource_health.status_map import (
    DEFAULT_STATUS_MAPS,
    StatusMap,
    find_status_map,
    get_generic_health,
    load_status_maps,
    lookup_key,
)

pytestmark = pytest.mark.unit

TABLE = """
Widget:
  unhealthyIsNotReady: true
  conditions:
    Ready:
      ready: true
      health: healthy
      message: true
      order: 1
      reasons:
        Provisioning: {health: unknown, notReady: true, status: Provisioning, order: 1}
    Synced:
      order: 2
      onFalse: {health: warning, message: true, order: 2}
    Degraded:
      health: unhealthy
      message: true
      order: 3
Empty: {}
"""


def _status(*conditions):
    return GenericStatus.from_document({"status": {"conditions": list(conditions)}})


@pytest.fixture
def widget() -> StatusMap:
    return load_status_maps(TABLE)["Widget"]


class TestEvaluate:
    def test_true_condition(self, widget):
        hs, matched = widget.evaluate(_status(
            {"type": "Ready", "status": "True", "reason": "Available", "message": "all good"},
        ))
        assert matched
        assert (hs.health, hs.ready, hs.status, hs.message) == (Health.HEALTHY, True, "Available", "all good")

    def test_false_healthy_condition_infers_unhealthy(self, widget):
        hs, matched = widget.evaluate(_status(
            {"type": "Ready", "status": "False", "reason": "BackendDown", "message": "no endpoints"},
        ))
        assert matched
        assert hs.health == Health.UNHEALTHY
        assert hs.status == "BackendDown"
        assert hs.message == "no endpoints"
        assert hs.ready is False

    def test_reason_override_applies_last(self, widget):
        hs, _ = widget.evaluate(_status(
            {"type": "Ready", "status": "True", "reason": "Provisioning", "message": "creating"},
        ))
        assert hs.health == Health.UNKNOWN
        assert hs.status == "Provisioning"
        assert hs.ready is False

    def test_higher_order_wins(self, widget):
        hs, _ = widget.evaluate(_status(
            {"type": "Degraded", "status": "True", "reason": "Throttled", "message": "rate limited"},
            {"type": "Ready", "status": "True", "reason": "Available", "message": "all good"},
        ))
        assert hs.health == Health.UNHEALTHY
        assert hs.status == "Throttled"
        assert hs.message == "rate limited"

    def test_unhealthy_is_not_ready(self, widget):
        hs, _ = widget.evaluate(_status(
            {"type": "Ready", "status": "True", "reason": "Available"},
            {"type": "Synced", "status": "False", "reason": "ApiError", "message": "403"},
        ))
        assert hs.health == Health.WARNING
        assert hs.ready is False
        assert hs.status == "ApiError"

    def test_unlisted_conditions_do_not_match(self, widget):
        hs, matched = widget.evaluate(_status({"type": "Other", "status": "True"}))
        assert not matched
        assert hs.health == Health.UNKNOWN

    def test_empty_table_is_bare_unknown(self):
        hs, matched = load_status_maps(TABLE)["Empty"].evaluate(_status({"type": "Ready", "status": "True"}))
        assert not matched
        assert hs.health == Health.UNKNOWN
        assert hs.status == ""


class TestLookup:
    def test_crossplane_groups_share_an_entry(self):
        assert lookup_key("s3.aws.upbound.io/v1beta1", "Bucket") == "crossplane.io"
        assert lookup_key("pkg.crossplane.io/v1", "Provider") == "crossplane.io"
        assert lookup_key("example.com/v1", "Widget") == "Widget"

    def test_api_version_specific_key_wins(self):
        assert find_status_map("serving.knative.dev/v1", "Service") is DEFAULT_STATUS_MAPS["serving.knative.dev/v1/Service"]
        assert find_status_map("v1", "Service") is None

    def test_get_generic_health_without_entry(self):
        assert get_generic_health({"apiVersion": "example.com/v1", "kind": "Widget"}) == (None, False)

    def test_crossplane_resource(self):
        hs, matched = get_generic_health({
            "apiVersion": "s3.aws.upbound.io/v1beta1",
            "kind": "Bucket",
            "status": {"conditions": [
                {"type": "Synced", "status": "True", "reason": "ReconcileSuccess"},
                {"type": "Ready", "status": "False", "reason": "Creating"},
            ]},
        })
        assert matched
        assert hs.health == Health.UNKNOWN
        assert hs.ready is False


def test_default_table_loads_every_entry():
    for key in ("crossplane.io", "Kustomization", "HelmRelease", "GitRepository", "Certificate", "ExternalSecret"):
        assert key in DEFAULT_STATUS_MAPS


def test_malformed_table_fails_fast():
    with pytest.raises(ValueError):
        load_status_maps("- just\n- a list\n")
