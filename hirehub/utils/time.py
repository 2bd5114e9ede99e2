import re
from datetime import datetime, timezone

from ..errors import DataIntegrityError


def utcnow():
    return datetime.now(timezone.utc)


def to_db(dt):
    """Columns are naive UTC."""
    if dt is None or dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def as_utc(dt):
    """SQLite hands back naive datetimes; treat them as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


_FRACTION = re.compile(r"\.(\d+)")


def parse_provider_time(value):
    """Parse an ISO-8601 timestamp as sent by the e-sign and background-check APIs.

    Providers send up to 7 fractional digits and a trailing ``Z``; both are
    normalized before handing off to ``datetime.fromisoformat``.
    """
    if not value:
        return None
    s = value.strip()
    if s.endswith('Z'):
        s = s[:-1] + '+00:00'
    s = _FRACTION.sub(lambda m: '.' + m.group(1)[:6].ljust(6, '0'), s, count=1)
    try:
        return as_utc(datetime.fromisoformat(s))
    except ValueError as e:
        raise DataIntegrityError(f"malformed timestamp {value!r}") from e


def human_ago(dt, now=None):
    now = now or utcnow()
    delta = now - as_utc(dt)
    days = delta.days
    if days >= 365:
        n = days // 365
        return f"{n} year{'s' if n > 1 else ''} ago"
    if days >= 30:
        n = days // 30
        return f"{n} month{'s' if n > 1 else ''} ago"
    if days >= 1:
        return f"{days} day{'s' if days > 1 else ''} ago"
    hours = delta.seconds // 3600
    if hours >= 1:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    return "just now"
