# SPDX-License-Identifier: MIT

from datetime import datetime, timedelta, timezone

import pytest

from resource_health.settings import (
    CERT_EXPIRY_WARNING_PERIOD,
    PROPERTY_AZURE_EXPIRY,
    PROPERTY_CERT_EXPIRY,
    PROPERTY_CERT_RENEWAL,
    EvaluationContext,
    HealthSettings,
    parse_duration,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize("text,expected", [
    ("48h", timedelta(hours=48)),
    ("1h30m", timedelta(hours=1, minutes=30)),
    ("90s", timedelta(seconds=90)),
    ("7d", timedelta(days=7)),
    ("2w", timedelta(weeks=2)),
    ("1.5h", timedelta(minutes=90)),
    ("250ms", timedelta(milliseconds=250)),
])
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", ["", "h", "10", "5 minutes", "3x"])
def test_parse_duration_rejects_garbage(text):
    with pytest.raises(ValueError):
        parse_duration(text)


class TestHealthSettings:
    def test_from_properties(self):
        settings = HealthSettings.from_properties({
            PROPERTY_CERT_EXPIRY: "72h",
            PROPERTY_CERT_RENEWAL: "1h",
            PROPERTY_AZURE_EXPIRY: "14d",
            "unrelated.key": "whatever",
        })
        assert settings.cert_expiry_warning_period == timedelta(hours=72)
        assert settings.cert_renewal_warning_period == timedelta(hours=1)
        assert settings.azure_expiry_warning_period == timedelta(days=14)

    def test_empty_properties_keep_defaults(self):
        settings = HealthSettings.from_properties({})
        assert settings.cert_expiry_warning_period == CERT_EXPIRY_WARNING_PERIOD

    def test_invalid_duration_raises(self):
        with pytest.raises(ValueError):
            HealthSettings.from_properties({PROPERTY_CERT_EXPIRY: "soon"})


class TestEvaluationContext:
    def test_reads_clock_once(self):
        calls = []

        def clock():
            calls.append(1)
            return datetime(2024, 1, 1, tzinfo=timezone.utc)

        ctx = EvaluationContext.create(HealthSettings(clock=clock))
        ctx.since(ctx.now)
        ctx.until(ctx.now)
        assert len(calls) == 1

    def test_naive_clock_is_utc(self):
        ctx = EvaluationContext.create(HealthSettings(clock=lambda: datetime(2024, 1, 1, 12)))
        assert ctx.now.tzinfo == timezone.utc

    def test_since_and_until(self, ctx, now):
        earlier = now - timedelta(minutes=5)
        assert ctx.since(earlier) == timedelta(minutes=5)
        assert ctx.until(earlier) == timedelta(minutes=-5)
