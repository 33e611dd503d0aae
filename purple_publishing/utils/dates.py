"""UTC timestamp helpers.

Timestamps are stored as naive UTC datetimes.
"""

from datetime import datetime, time, timezone


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value):
    """Serialize a stored timestamp as ISO-8601 with a ``Z`` suffix."""
    if value is None:
        return None
    return value.isoformat() + 'Z'


def parse_datetime(value, end_of_day=False):
    """Parse an ISO date or datetime query value into naive UTC.

    Raises ValueError for malformed input. A bare date becomes midnight, or
    the last microsecond of that day when ``end_of_day`` is set.
    """
    value = value.strip()
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    parsed = datetime.fromisoformat(value)
    if len(value) == 10 and end_of_day:
        parsed = datetime.combine(parsed.date(), time.max)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
