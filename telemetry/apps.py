from django.apps import AppConfig


class TelemetryConfig(AppConfig):
    name = 'telemetry'
    verbose_name = 'Frontend metrics relay'

    runtime = None

    def ready(self):
        from .runtime import build_runtime

        # One registry/sink per process, built after settings are loaded.
        if self.runtime is None:
            self.runtime = build_runtime()
