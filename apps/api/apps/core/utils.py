"""
Value coercion helpers for payloads coming from offline clients.

Clients send ids, timestamps and metadata in whatever shape their local store
produced. These helpers normalise them without raising.
"""
import json
import uuid
from datetime import datetime, timezone as dt_timezone
from typing import Any, Optional

from django.utils import timezone
from django.utils.dateparse import parse_datetime


def new_record_id() -> str:
    """Time-based UUID, same flavour clients generate."""
    return str(uuid.uuid1())


def is_valid_uuid(value: Any) -> bool:
    if isinstance(value, uuid.UUID):
        return True
    if not isinstance(value, str) or not value:
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def to_safe_datetime(value: Any) -> datetime:
    """
    Coerce a datetime / ISO-8601 string to an aware datetime.

    Anything missing or unparseable becomes ``timezone.now()``.
    """
    parsed: Optional[datetime] = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = parse_datetime(value)
        except ValueError:
            parsed = None
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        # epoch milliseconds from JS clients
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=dt_timezone.utc)
        except (OverflowError, OSError, ValueError):
            parsed = None

    if parsed is None:
        return timezone.now()
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed


def safe_json_parse(value: Any, default: Optional[dict] = None) -> dict:
    """Return ``value`` as a dict, parsing JSON strings; fall back to ``default``."""
    fallback = {} if default is None else default
    if isinstance(value, dict):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except (TypeError, ValueError):
            return fallback
        return parsed if isinstance(parsed, dict) else fallback
    return fallback
