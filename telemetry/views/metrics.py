"""
Metrics relay endpoints.

``POST /metrics-client`` receives one event relayed by the frontend,
counts it when it is a recognised kind and appends it to the JSON-lines
log before acknowledging. ``GET /metrics`` serves the counter registry in
the Prometheus text exposition format.
"""
from __future__ import annotations

from django.http import HttpResponse
from django.views.decorators.http import require_GET
from drf_yasg.utils import swagger_auto_schema
from rest_framework.decorators import api_view, authentication_classes, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle

from ..runtime import get_runtime
from ..serializers.events import ClientEventSerializer


class MetricsClientThrottle(AnonRateThrottle):
    scope = 'metrics_client'


@swagger_auto_schema(method='post', request_body=ClientEventSerializer)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([MetricsClientThrottle])
def metrics_client(request):
    """Count and log one frontend event."""
    s = ClientEventSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    # The log write completes (or raises) before the acknowledgement is sent.
    result = get_runtime().ingestor.ingest(s.to_event())
    return Response({'ok': True, 'counted': result.counted})


@require_GET
def metrics(request):
    registry = get_runtime().registry
    return HttpResponse(registry.serialize(), content_type=registry.content_type)
