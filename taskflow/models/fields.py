"""
fields.py — Column helpers shared by the ORM models.
Timestamps are stored as UTC; SQLite hands them back naive, so everything
read from the database goes through as_utc() before it is compared or sent.
"""

import json
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def iso(value: datetime | None) -> str | None:
    """ISO-8601 with a trailing Z, the way the frontend expects dates."""
    value = as_utc(value)
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")


def load_list(raw: str | None) -> list:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        return []
    return value if isinstance(value, list) else []


def dump_list(value: list | None) -> str:
    return json.dumps(value or [])


def like_pattern(term: str) -> str:
    """Substring LIKE pattern that matches % and _ literally, escaped with a backslash."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
