# SPDX-License-Identifier: MIT

from datetime import timedelta

import pytest

from resource_health.utils import (
    compact_duration,
    go_duration,
    human_case,
    human_duration,
    short_human_duration,
    split_words,
    start_deadline,
    truncate,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize("text,expected", [
    ("shutting-down", "Shutting Down"),
    ("UPDATE_ROLLBACK_COMPLETE", "Update Rollback Complete"),
    ("MemoryPressure", "Memory Pressure"),
    ("PodInitializing", "Pod Initializing"),
    ("in-use", "In Use"),
    ("", ""),
])
def test_human_case(text, expected):
    assert human_case(text) == expected


def test_split_words_keeps_acronyms():
    assert split_words("OOMKilled") == ["OOM", "Killed"]


def test_truncate():
    assert truncate("short", 10) == "short"
    assert truncate("a" * 20, 10) == "aaaaaaa..."


@pytest.mark.parametrize("d,expected", [
    (timedelta(seconds=5), "5s"),
    (timedelta(minutes=40), "40m0s"),
    (timedelta(hours=1, minutes=2), "1h2m0s"),
    (timedelta(hours=30), "30h0m0s"),
])
def test_go_duration(d, expected):
    assert go_duration(d) == expected


@pytest.mark.parametrize("d,expected", [
    (timedelta(seconds=45), "45s"),
    (timedelta(minutes=3, seconds=20), "3m20s"),
    (timedelta(minutes=45), "45m"),
    (timedelta(hours=5, minutes=10), "5h10m"),
    (timedelta(hours=20), "20h"),
    (timedelta(days=3, hours=4), "3d4h"),
    (timedelta(days=30), "30d"),
])
def test_human_duration(d, expected):
    assert human_duration(d) == expected


@pytest.mark.parametrize("d,expected", [
    (timedelta(seconds=30), "30s"),
    (timedelta(minutes=12), "12m"),
    (timedelta(hours=3), "3h"),
    (timedelta(days=2, hours=5), "2d"),
])
def test_short_human_duration(d, expected):
    assert short_human_duration(d) == expected


@pytest.mark.parametrize("d,expected", [
    (timedelta(weeks=2), "2w0d0h"),
    (timedelta(days=3, hours=4), "3d4h"),
    (timedelta(hours=5), "5h0m"),
    (timedelta(minutes=12, seconds=30), "12m30s"),
])
def test_compact_duration(d, expected):
    assert compact_duration(d) == expected


class TestStartDeadline:
    def test_defaults_to_buffer(self):
        assert start_deadline([{"name": "app"}]) == timedelta(minutes=10)

    def test_long_readiness_probe_extends_deadline(self):
        containers = [{
            "name": "slow",
            "readinessProbe": {"initialDelaySeconds": 600, "periodSeconds": 30, "failureThreshold": 5},
        }]
        # 600 + 5 * (30 + 1) = 755s, truncated to the minute
        assert start_deadline(containers) == timedelta(minutes=12)
