from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from telemetry.client.emitter import MetricEmitter


def _parse_label(raw):
    key, sep, value = raw.partition('=')
    if not sep or not key:
        raise CommandError(f"label must look like key=value, got {raw!r}")
    return key, value


class Command(BaseCommand):
    help = "Send one event to the metrics-client endpoint and report what happened."

    def add_arguments(self, parser):
        parser.add_argument('event')
        parser.add_argument('--value', type=float, default=1.0)
        parser.add_argument('--label', action='append', default=[], metavar='KEY=VALUE')
        parser.add_argument('--endpoint', default=None)
        parser.add_argument('--timeout', type=float, default=10)

    def handle(self, *args, **options):
        labels = dict(_parse_label(raw) for raw in options['label'])
        value = float(options['value'])
        if value.is_integer():
            value = int(value)
        emitter = MetricEmitter(options['endpoint'] or settings.METRICS_CLIENT_ENDPOINT, timeout=options['timeout'])
        try:
            result = emitter.emit(options['event'], value, labels).result()
        finally:
            emitter.close()
        if result.ok:
            self.stdout.write(self.style.SUCCESS(f"Sent {options['event']} ({result.status_code})"))
        else:
            self.stdout.write(self.style.WARNING(f"Event {options['event']} not delivered: {result.error}"))
