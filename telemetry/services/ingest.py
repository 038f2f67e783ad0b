"""
Ingestion of relayed frontend events.

An event is counted first (when its name is a recognised kind and its
context carries every label the kind declares) and then appended to the
JSON-lines log. The two steps are independent: a counting problem is
logged and the event is still written, while a write failure propagates
to the caller without undoing the increment.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Union

from django.utils import timezone

from .counters import CounterRegistry
from .sink import JsonLinesSink

log = logging.getLogger(__name__)

Number = Union[int, float]


@dataclass(frozen=True)
class ClientEvent:
    event: str
    value: Number = 1
    context: Dict[str, str] = field(default_factory=dict)
    timestamp: Optional[str] = None


@dataclass(frozen=True)
class IngestResult:
    counted: bool
    record: Dict[str, Any]


class MetricIngestor:
    def __init__(self, registry: CounterRegistry, sink: JsonLinesSink, kinds: Iterable[str] = ()):
        self.registry = registry
        self.sink = sink
        self.kinds = frozenset(kinds)

    def ingest(self, event: ClientEvent) -> IngestResult:
        counted = self._count(event)
        record = {
            'event': event.event,
            'value': event.value,
            'context': dict(event.context),
            'timestamp': event.timestamp or timezone.now().isoformat(),
        }
        self.sink.append(record)
        return IngestResult(counted=counted, record=record)

    def _count(self, event: ClientEvent) -> bool:
        if event.event not in self.kinds:
            log.debug("event %r is not a counted kind; logging only", event.event)
            return False
        counter = self.registry.get(event.event)
        if counter is None:
            log.warning("no counter registered for kind %r", event.event)
            return False
        try:
            counted = counter.increment(event.context, event.value)
        except ValueError as exc:
            log.warning("could not count %r: %s", event.event, exc)
            return False
        if not counted:
            missing = [k for k in counter.label_names if k not in event.context]
            log.warning("event %r missing labels %s; logging only", event.event, missing)
        return counted
