import logging
import threading

import pytest
import requests

from telemetry.client.emitter import DEFAULT_ENDPOINT, EmitResult, MetricEmitter, build_payload


class FakeSession:
    """Stands in for requests.Session; records posts and answers or raises."""

    def __init__(self, status_code=200, exc=None):
        self.status_code = status_code
        self.exc = exc
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append({'url': url, 'json': json, 'timeout': timeout})
        if self.exc is not None:
            raise self.exc
        r = requests.Response()
        r.status_code = self.status_code
        r.url = url
        return r


@pytest.fixture
def make_emitter():
    emitters = []

    def factory(session, **kwargs):
        e = MetricEmitter(session=session, **kwargs)
        emitters.append(e)
        return e

    yield factory
    for e in emitters:
        e.close()


def test_payload_uses_event_context_shape():
    payload = build_payload('frontend_route_change', 1, {'path': '/login', 'n': 3})
    assert set(payload) == {'timestamp', 'event', 'value', 'context'}
    assert payload['event'] == 'frontend_route_change'
    assert payload['context'] == {'path': '/login', 'n': '3'}
    assert payload['timestamp'].endswith('+00:00')


def test_emit_posts_once_to_endpoint(make_emitter):
    session = FakeSession()
    emitter = make_emitter(session)
    result = emitter.emit('frontend_route_change', 1, {'path': '/login'}).result(timeout=5)
    assert result == EmitResult(ok=True, status_code=200)
    assert len(session.calls) == 1
    call = session.calls[0]
    assert call['url'] == DEFAULT_ENDPOINT
    assert call['json']['context'] == {'path': '/login'}
    assert call['timeout'] is None


def test_track_route_change(make_emitter):
    session = FakeSession()
    make_emitter(session).track_route_change('/doctor-management').result(timeout=5)
    assert session.calls[0]['json']['event'] == 'frontend_route_change'
    assert session.calls[0]['json']['context'] == {'path': '/doctor-management'}


def test_unreachable_endpoint_does_not_reach_caller(make_emitter, caplog):
    emitter = make_emitter(FakeSession(exc=requests.ConnectionError('connection refused')))
    steps = []
    with caplog.at_level(logging.WARNING, logger='telemetry.client.emitter'):
        future = emitter.emit('frontend_route_change', 1, {'path': '/login'})
        steps.append('navigated')
        result = future.result(timeout=5)
    assert steps == ['navigated']
    assert result.ok is False
    assert 'connection refused' in result.error
    assert 'Failed to push' in caplog.text


def test_error_status_is_logged_not_raised(make_emitter, caplog):
    emitter = make_emitter(FakeSession(status_code=503))
    result = emitter.emit('frontend_route_change').result(timeout=5)
    assert result.ok is False
    assert result.status_code == 503
    assert 'Failed to push' in caplog.text


def test_timeout_is_swallowed(make_emitter):
    emitter = make_emitter(FakeSession(exc=requests.Timeout('read timed out')), timeout=0.5)
    result = emitter.emit('frontend_route_change').result(timeout=5)
    assert result.ok is False


def test_invalid_value_is_dropped_without_posting(make_emitter):
    session = FakeSession()
    result = make_emitter(session).emit('frontend_route_change', float('nan')).result(timeout=5)
    assert result.ok is False
    assert session.calls == []


def test_emit_after_close_does_not_raise(make_emitter):
    session = FakeSession()
    emitter = make_emitter(session)
    emitter.close()
    result = emitter.emit('frontend_route_change').result(timeout=5)
    assert result.ok is False


def test_each_emit_is_an_independent_call(make_emitter):
    session = FakeSession()
    emitter = make_emitter(session)
    futures = [emitter.track_route_change(f'/p{i}') for i in range(10)]
    assert all(f.result(timeout=5).ok for f in futures)
    assert sorted(c['json']['context']['path'] for c in session.calls) == sorted(f'/p{i}' for i in range(10))


@pytest.mark.parametrize('value, context', [
    (10 ** 400, {'path': '/'}),
    ('1', {'path': '/'}),
    (1, ['path', '/']),
    (1, 'path=/'),
])
def test_unbuildable_payload_never_reaches_caller(make_emitter, value, context):
    session = FakeSession()
    result = make_emitter(session).emit('frontend_route_change', value, context).result(timeout=5)
    assert result.ok is False
    assert result.error
    assert session.calls == []


class HangingSession(FakeSession):
    """Blocks posts to paths starting with /hang until released."""

    def __init__(self):
        super().__init__()
        self.release = threading.Event()

    def post(self, url, json=None, timeout=None):
        if json['context']['path'].startswith('/hang'):
            self.release.wait(10)
        return super().post(url, json=json, timeout=timeout)


def test_hung_calls_do_not_hold_up_later_emits(make_emitter):
    session = HangingSession()
    emitter = make_emitter(session)
    try:
        hung = [emitter.track_route_change(f'/hang{i}') for i in range(8)]
        later = emitter.track_route_change('/later').result(timeout=5)
        assert later.ok is True
        assert [c['json']['context']['path'] for c in session.calls] == ['/later']
        assert not any(f.done() for f in hung)
    finally:
        session.release.set()
    assert all(f.result(timeout=5).ok for f in hung)
