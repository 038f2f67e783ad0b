"""
Wiring of the metrics path.

``build_runtime`` constructs the counter registry, the JSON-lines sink and
the ingestion service from settings and hands the collaborators to each
other explicitly. The app config builds one instance at startup; views and
middleware reach it through :func:`get_runtime`.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from django.apps import apps
from django.conf import settings

from .services.counters import CounterRegistry
from .services.ingest import MetricIngestor
from .services.sink import JsonLinesSink

HTTP_REQUESTS = 'http_requests'


@dataclass
class MetricsRuntime:
    registry: CounterRegistry
    sink: JsonLinesSink
    ingestor: MetricIngestor


def build_runtime(*, log_path: Optional[Union[str, Path]] = None,
                  kinds: Optional[Mapping[str, Mapping[str, Any]]] = None,
                  default_metrics: Optional[bool] = None) -> MetricsRuntime:
    if default_metrics is None:
        default_metrics = settings.METRICS_DEFAULT_COLLECTORS
    if kinds is None:
        kinds = settings.METRICS_CLIENT_KINDS

    registry = CounterRegistry(default_metrics=default_metrics)
    for name, spec in kinds.items():
        registry.register(name, spec.get('help') or name, spec.get('labels', ()))
    registry.register(HTTP_REQUESTS, 'Total number of HTTP requests', ('method', 'route', 'status'))

    sink = JsonLinesSink(log_path or settings.METRICS_CLIENT_LOG)
    ingestor = MetricIngestor(registry, sink, kinds=kinds.keys())
    return MetricsRuntime(registry=registry, sink=sink, ingestor=ingestor)


def get_runtime() -> MetricsRuntime:
    return apps.get_app_config('telemetry').runtime
