"""
Process-scoped counter registry backed by ``prometheus_client``.

The registry owns a private ``CollectorRegistry`` rather than the
library's module-level global one, so each instance is independent and
can be handed to the ingestion service and the scrape view explicitly.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Tuple

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    GCCollector,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredCounter:
    """A named counter with a fixed, ordered set of label names."""
    name: str
    label_names: Tuple[str, ...]
    metric: Counter

    def increment(self, labels: Mapping[str, str], amount: float = 1) -> bool:
        """Add ``amount`` to the tuple built from the declared label keys.

        Returns ``False`` (and leaves the counter alone) when any declared
        label key is missing from ``labels``. Keys that were not declared
        are ignored.
        """
        if any(k not in labels for k in self.label_names):
            return False
        if self.label_names:
            self.metric.labels(*[str(labels[k]) for k in self.label_names]).inc(amount)
        else:
            self.metric.inc(amount)
        return True


class CounterRegistry:
    content_type = CONTENT_TYPE_LATEST

    def __init__(self, *, default_metrics: bool = True) -> None:
        self._registry = CollectorRegistry(auto_describe=True)
        self._counters: Dict[str, RegisteredCounter] = {}
        self._lock = threading.Lock()
        if default_metrics:
            ProcessCollector(registry=self._registry)
            PlatformCollector(registry=self._registry)
            GCCollector(registry=self._registry)

    def register(self, name: str, help: str, label_names: Iterable[str] = ()) -> RegisteredCounter:
        label_names = tuple(label_names)
        with self._lock:
            existing = self._counters.get(name)
            if existing is not None:
                if existing.label_names != label_names:
                    raise ValueError(
                        f"counter {name!r} already registered with labels {existing.label_names}"
                    )
                return existing
            metric = Counter(name, help, label_names, registry=self._registry)
            counter = RegisteredCounter(name=name, label_names=label_names, metric=metric)
            self._counters[name] = counter
        log.debug("registered counter %s%s", name, list(label_names))
        return counter

    def get(self, name: str) -> Optional[RegisteredCounter]:
        return self._counters.get(name)

    def increment(self, name: str, labels: Mapping[str, str], amount: float = 1) -> bool:
        counter = self._counters.get(name)
        if counter is None:
            return False
        return counter.increment(labels, amount)

    def sample(self, name: str, labels: Optional[Mapping[str, str]] = None) -> Optional[float]:
        """Current total of ``name`` for one label tuple, or None if never touched."""
        if name.endswith("_total"):
            name = name[: -len("_total")]
        return self._registry.get_sample_value(f"{name}_total", dict(labels or {}))

    def serialize(self) -> bytes:
        """Dump every collector in the Prometheus text exposition format."""
        return generate_latest(self._registry)
