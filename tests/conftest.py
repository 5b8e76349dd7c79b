# SPDX-License-Identifier: MIT

from datetime import datetime

import pytest

from resource_health.settings import EvaluationContext, HealthSettings

from .helpers import FIXTURES, NOW, render_fixture


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def settings() -> HealthSettings:
    return HealthSettings(clock=lambda: NOW)


@pytest.fixture
def ctx(settings) -> EvaluationContext:
    return EvaluationContext.create(settings)


@pytest.fixture
def load_fixture():
    def _load(name: str) -> dict:
        return render_fixture((FIXTURES / name).read_text(encoding="utf-8"))

    return _load
