import math
from datetime import datetime, timezone as dt_timezone

from django.utils.dateparse import parse_datetime
from rest_framework import serializers

from telemetry.services.ingest import ClientEvent


class FiniteNumberField(serializers.Field):
    """JSON number that is finite and not negative. Booleans are rejected."""
    default_error_messages = {
        'invalid': 'A finite number is required.',
        'negative': 'Counter values cannot be negative.',
    }

    def to_internal_value(self, data):
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            self.fail('invalid')
        try:
            finite = math.isfinite(data)
        except OverflowError:
            # ints beyond float range cannot be added to a counter
            finite = False
        if not finite:
            self.fail('invalid')
        if data < 0:
            self.fail('negative')
        return data

    def to_representation(self, value):
        return value


class EventTimestampField(serializers.Field):
    """ISO-8601 string or epoch milliseconds, normalised to an ISO-8601 string.

    Anything that cannot be read as a point in time becomes ``None`` so the
    server assigns its own timestamp instead of dropping the event.
    """

    def to_internal_value(self, data):
        if isinstance(data, bool):
            return None
        if isinstance(data, (int, float)):
            try:
                return datetime.fromtimestamp(data / 1000, tz=dt_timezone.utc).isoformat()
            except (OverflowError, OSError, ValueError):
                return None
        if isinstance(data, str):
            try:
                parsed = parse_datetime(data.strip())
            except ValueError:
                parsed = None
            return parsed.isoformat() if parsed is not None else None
        return None

    def to_representation(self, value):
        return value


class ClientEventSerializer(serializers.Serializer):
    event = serializers.CharField(max_length=200)
    value = FiniteNumberField(default=1, allow_null=True)
    context = serializers.DictField(
        child=serializers.CharField(allow_blank=True, trim_whitespace=False),
        default=dict,
    )
    timestamp = EventTimestampField(required=False, allow_null=True)

    def validate_value(self, v):
        # null is treated like an absent value
        return 1 if v is None else v

    def to_event(self) -> ClientEvent:
        vd = self.validated_data
        return ClientEvent(
            event=vd['event'],
            value=vd['value'],
            context=dict(vd['context']),
            timestamp=vd.get('timestamp'),
        )
