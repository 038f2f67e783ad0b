import json

import pytest

from telemetry.services.counters import CounterRegistry
from telemetry.services.ingest import ClientEvent, MetricIngestor
from telemetry.services.sink import JsonLinesSink


@pytest.fixture
def registry():
    r = CounterRegistry(default_metrics=False)
    r.register('frontend_route_change', 'Route changes', ['path'])
    r.register('http_requests', 'Requests', ['method', 'route', 'status'])
    return r


@pytest.fixture
def ingestor(registry, tmp_path):
    return MetricIngestor(registry, JsonLinesSink(tmp_path / 'events.log'), kinds=['frontend_route_change'])


def logged(ingestor):
    return [json.loads(line) for line in ingestor.sink.path.read_text(encoding='utf-8').splitlines()]


def test_recognised_event_is_counted_and_logged(ingestor, registry):
    result = ingestor.ingest(ClientEvent('frontend_route_change', 3, {'path': '/login'}, '2026-01-01T00:00:00+00:00'))
    assert result.counted is True
    assert registry.sample('frontend_route_change', {'path': '/login'}) == 3
    assert logged(ingestor) == [{
        'event': 'frontend_route_change',
        'value': 3,
        'context': {'path': '/login'},
        'timestamp': '2026-01-01T00:00:00+00:00',
    }]


def test_unrecognised_event_is_logged_only(ingestor, registry):
    result = ingestor.ingest(ClientEvent('button_click', 1, {'path': '/login'}))
    assert result.counted is False
    assert registry.sample('frontend_route_change', {'path': '/login'}) is None
    assert len(logged(ingestor)) == 1


def test_registered_counter_outside_kinds_is_not_client_writable(ingestor, registry):
    ingestor.ingest(ClientEvent('http_requests', 1, {'method': 'GET', 'route': '/', 'status': '200'}))
    assert registry.sample('http_requests', {'method': 'GET', 'route': '/', 'status': '200'}) is None


def test_missing_label_is_logged_not_counted(ingestor, registry, caplog):
    result = ingestor.ingest(ClientEvent('frontend_route_change', 1, {'route': '/login'}))
    assert result.counted is False
    assert 'missing labels' in caplog.text
    assert logged(ingestor)[0]['context'] == {'route': '/login'}


def test_server_assigns_timestamp_when_absent(ingestor):
    record = ingestor.ingest(ClientEvent('frontend_route_change', 1, {'path': '/'})).record
    assert record['timestamp']
    assert 'T' in record['timestamp']


def test_identical_events_are_not_deduplicated(ingestor, registry):
    event = ClientEvent('frontend_route_change', 1, {'path': '/'})
    ingestor.ingest(event)
    ingestor.ingest(event)
    assert registry.sample('frontend_route_change', {'path': '/'}) == 2
    assert len(logged(ingestor)) == 2


def test_log_failure_keeps_increment(registry, tmp_path):
    ingestor = MetricIngestor(registry, JsonLinesSink(tmp_path), kinds=['frontend_route_change'])
    with pytest.raises(OSError):
        ingestor.ingest(ClientEvent('frontend_route_change', 1, {'path': '/'}))
    assert registry.sample('frontend_route_change', {'path': '/'}) == 1


def test_counter_failure_still_logs(ingestor, registry):
    result = ingestor.ingest(ClientEvent('frontend_route_change', -1, {'path': '/'}))
    assert result.counted is False
    assert len(logged(ingestor)) == 1
