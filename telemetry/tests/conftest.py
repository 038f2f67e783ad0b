import pytest
from django.apps import apps
from django.core.cache import cache
from rest_framework.test import APIClient

from telemetry.runtime import build_runtime


@pytest.fixture
def log_path(tmp_path):
    return tmp_path / 'logs' / 'metrics-client.log'


@pytest.fixture
def runtime(log_path):
    """Swap the process runtime for one writing to a temp log, without default collectors."""
    config = apps.get_app_config('telemetry')
    previous = config.runtime
    config.runtime = build_runtime(log_path=log_path, default_metrics=False)
    cache.clear()
    yield config.runtime
    config.runtime = previous
    cache.clear()


@pytest.fixture
def client(runtime):
    return APIClient()
