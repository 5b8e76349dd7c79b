# SPDX-License-Identifier: MIT

import pytest

from resource_health.models import Health
from resource_health.status_name import RULES, classify, get_health_from_status_name

pytestmark = pytest.mark.unit


@pytest.mark.parametrize("raw,status,health,ready", [
    ("running", "Running", Health.HEALTHY, True),
    ("AVAILABLE", "Available", Health.HEALTHY, True),
    ("in-use", "In Use", Health.HEALTHY, True),
    ("shutting-down", "Shutting Down", Health.UNKNOWN, False),
    ("stopped", "Stopped", Health.UNKNOWN, True),
    ("CREATE_FAILED", "Create Failed", Health.UNHEALTHY, True),
    ("UPDATE_ROLLBACK_IN_PROGRESS", "Update Rollback In Progress", Health.WARNING, False),
    ("UPDATE_ROLLBACK_COMPLETE", "Update Rollback Complete", Health.WARNING, True),
    ("rebooting", "Rebooting", Health.HEALTHY, False),
    ("inaccessible-encryption-credentials", "Inaccessible Encryption Credentials", Health.UNHEALTHY, True),
    ("restore-error", "Restore Error", Health.UNHEALTHY, True),
    ("configuring-log-exports", "Configuring Log Exports", Health.HEALTHY, False),
])
def test_heuristic(raw, status, health, ready):
    hs = get_health_from_status_name(raw)
    assert hs.status == status
    assert hs.health == health
    assert hs.ready is ready


def test_unmatched_status_is_unknown():
    hs = get_health_from_status_name("florping")
    assert hs.status == "Florping"
    assert hs.health == Health.UNKNOWN
    assert hs.ready is False


def test_first_non_empty_reason_is_the_message():
    assert get_health_from_status_name("failed", "", "disk full", "ignored").message == "disk full"


@pytest.mark.parametrize("raw", [
    "running", "shutting-down", "UPDATE_ROLLBACK_COMPLETE", "storage-full", "DELETE_IN_PROGRESS", "active_impaired",
])
def test_classifying_canonical_output_is_stable(raw):
    first = get_health_from_status_name(raw)
    second = get_health_from_status_name(first.status)
    assert (second.health, second.ready) == (first.health, first.ready)


def test_rules_are_ordered_first_match_wins():
    assert classify("UPDATE_FAILED").name == "failed"
    assert [rule.name for rule in RULES][0] == "transient"
