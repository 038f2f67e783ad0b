"""
Fire-and-forget relay of UI events to the metrics-client endpoint.

``MetricEmitter.emit`` builds the event payload, hands one HTTP POST to a
thread of its own and returns straight away. Whatever happens to the
request (connection refused, timeout, non-2xx answer) is logged as a
warning and recorded in the returned future's :class:`EmitResult`; it is
never raised to the code that emitted the event. There is no retry and no
queue, so an event lost in transit stays lost.
"""
from __future__ import annotations

import logging
import math
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Union

import requests

log = logging.getLogger(__name__)

DEFAULT_ENDPOINT = 'http://localhost:5050/metrics-client'

Number = Union[int, float]


@dataclass(frozen=True)
class EmitResult:
    ok: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


def build_payload(event: str, value: Number = 1, context: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    try:
        finite = not isinstance(value, bool) and isinstance(value, (int, float)) and math.isfinite(value)
    except OverflowError:
        finite = False
    if not finite:
        raise ValueError(f"metric value must be a finite number, got {value!r}")
    return {
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'event': event,
        'value': value,
        'context': {str(k): str(v) for k, v in (context or {}).items()},
    }


def _done(result: EmitResult) -> 'Future[EmitResult]':
    f: 'Future[EmitResult]' = Future()
    f.set_result(result)
    return f


class MetricEmitter:
    def __init__(self, endpoint: str = DEFAULT_ENDPOINT, *, session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None):
        self.endpoint = endpoint
        self.session = session or requests.Session()
        # None leaves the transport's own default in place
        self.timeout = timeout
        self._closed = False

    def emit(self, event: str, value: Number = 1, context: Optional[Mapping[str, Any]] = None) -> 'Future[EmitResult]':
        """Relay one event without blocking; the returned future may be ignored.

        Each call gets its own daemon thread, so a request that never
        answers holds up only itself.
        """
        try:
            payload = build_payload(event, value, context)
        except (ValueError, TypeError, OverflowError, AttributeError) as e:
            log.warning("[metrics] Dropped %s: %s", event, e)
            return _done(EmitResult(ok=False, error=str(e)))
        if self._closed:
            log.warning("[metrics] Failed to push %s: emitter closed", event)
            return _done(EmitResult(ok=False, error='emitter closed'))

        future: 'Future[EmitResult]' = Future()
        thread = threading.Thread(target=self._run, args=(payload, future), name='metric-emit', daemon=True)
        try:
            thread.start()
        except RuntimeError as e:
            log.warning("[metrics] Failed to push %s: %s", event, e)
            future.set_result(EmitResult(ok=False, error=str(e)))
        return future

    def track_route_change(self, path: str) -> 'Future[EmitResult]':
        return self.emit('frontend_route_change', 1, {'path': path})

    def close(self) -> None:
        """Refuse further emissions; calls already in flight run to completion."""
        self._closed = True

    def _run(self, payload: Dict[str, Any], future: 'Future[EmitResult]') -> None:
        try:
            future.set_result(self._send(payload))
        except Exception as e:
            log.exception("[metrics] Failed to push %s", payload['event'])
            future.set_exception(e)

    def _send(self, payload: Dict[str, Any]) -> EmitResult:
        try:
            r = self.session.post(self.endpoint, json=payload, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            log.warning("[metrics] Failed to push %s: %s", payload['event'], e)
            status = e.response.status_code if e.response is not None else None
            return EmitResult(ok=False, status_code=status, error=str(e))
        return EmitResult(ok=True, status_code=r.status_code)
