from datetime import datetime, timezone

import pytest

from stackdriver_adapter.core.models.config import Config
from stackdriver_adapter.core.models.objects import ResourceModel
from stackdriver_adapter.core.translator import Translator
from stackdriver_adapter.utils.clock import FixedClock

NOW = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Make sure the environment of the test runner doesn't leak into the settings."""
    for name in ["PROJECT", "CLUSTER", "LOCATION", "METRICS_PREFIX", "RESOURCE_MODEL", "REQUEST_WINDOW"]:
        monkeypatch.delenv(f"SD_ADAPTER_{name}", raising=False)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def config() -> Config:
    return Config(project="my-project", cluster="my-cluster", location="us-central1-a", request_window=120)


@pytest.fixture
def legacy_config() -> Config:
    return Config(project="my-project", cluster="my-cluster", resource_model=ResourceModel.Legacy, request_window=120)


@pytest.fixture
def translator(config, clock) -> Translator:
    return Translator(config, clock=clock)


@pytest.fixture
def legacy_translator(legacy_config, clock) -> Translator:
    return Translator(legacy_config, clock=clock)
