"""
URL mappings for the metrics relay.

Paths match the URLs the frontend emitter and the Prometheus scraper use;
trailing slashes are deliberately omitted.
"""
from django.urls import path

from .views import health
from .views import metrics


urlpatterns = [
    path('metrics-client', metrics.metrics_client, name='metrics_client'),
    path('metrics', metrics.metrics, name='metrics'),
    path('healthz', health.healthz, name='healthz'),
]
