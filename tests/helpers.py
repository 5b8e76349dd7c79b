# SPDX-License-Identifier: MIT

"""Time helpers shared by the tests; every test runs against the frozen NOW."""

import re
from datetime import datetime, timedelta, timezone
from pathlib import Path

import yaml

FIXTURES = Path(__file__).parent / "fixtures"

NOW = datetime(2024, 7, 1, 12, 0, 0, tzinfo=timezone.utc)

_NOW_TOKEN = re.compile(r"@now(?:([+-])(\d+)([smhdw]))?")
_UNITS = {"s": "seconds", "m": "minutes", "h": "hours", "d": "days", "w": "weeks"}


def rfc3339(ts: datetime) -> str:
    return ts.strftime("%Y-%m-%dT%H:%M:%SZ")


def ago(**kwargs) -> str:
    return rfc3339(NOW - timedelta(**kwargs))


def from_now(**kwargs) -> str:
    return rfc3339(NOW + timedelta(**kwargs))


def _substitute(match: re.Match) -> str:
    ts = NOW
    if match.group(1):
        delta = timedelta(**{_UNITS[match.group(3)]: int(match.group(2))})
        ts = ts + delta if match.group(1) == "+" else ts - delta
    return f'"{rfc3339(ts)}"'


def render_fixture(text: str) -> dict:
    """Parse fixture YAML, replacing unquoted ``@now-15m`` style tokens with timestamps."""
    return yaml.safe_load(_NOW_TOKEN.sub(_substitute, text))
