"""
ASGI config for the hms project.

Requests are served by independent handler tasks; the metrics registry
and log sink they share are process-wide and safe for concurrent use.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "hms.settings")

application = get_asgi_application()
