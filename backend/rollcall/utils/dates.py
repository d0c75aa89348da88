"""Calendar-day helpers.

Attendance tokens and marks are keyed by a calendar day computed on the
server. The day boundary follows ``ATTENDANCE_TIMEZONE`` (UTC unless a
deployment pins the institution's zone); client clocks are never consulted.
"""
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from flask import current_app, has_app_context

from rollcall.errors import ValidationError

DATE_FORMAT = '%Y-%m-%d'


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the storage convention."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def zone_for(name: str):
    """Time zone for an ``ATTENDANCE_TIMEZONE`` value; raises ``ValueError`` if unknown."""
    name = name or 'UTC'
    if name.upper() == 'UTC':
        return timezone.utc
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        raise ValueError(f'Unknown ATTENDANCE_TIMEZONE: {name}')


def attendance_zone():
    name = 'UTC'
    if has_app_context():
        name = current_app.config.get('ATTENDANCE_TIMEZONE') or 'UTC'
    return zone_for(name)


def today() -> date:
    """Server-side calendar day for new tokens and check-ins."""
    return datetime.now(attendance_zone()).date()


def parse_day(value: str, field: str = 'date') -> date:
    """Parse a ``YYYY-MM-DD`` string."""
    if not value:
        raise ValidationError(f'{field} is required')
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError:
        raise ValidationError(f'{field} must use the YYYY-MM-DD format')


def format_day(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def isoformat(value: datetime) -> str:
    """Serialise a stored naive UTC timestamp."""
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc).isoformat().replace('+00:00', 'Z')
