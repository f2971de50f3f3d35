"""
Query-string parsing for list filters.

Malformed values are rejected with a DRF ValidationError (400) before they
reach the ORM.
"""
from datetime import datetime

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from rest_framework.exceptions import ValidationError

from apps.core.utils import is_valid_uuid


def uuid_query_param(request, name):
    """Return ?name= as a UUID string, None when absent."""
    value = request.query_params.get(name)
    if not value:
        return None
    if not is_valid_uuid(value):
        raise ValidationError({name: f"'{value}' is not a valid UUID."})
    return value


def date_query_param(request, name):
    """
    Return ?name= as an aware datetime, or a date for YYYY-MM-DD values.

    None when absent.
    """
    value = request.query_params.get(name)
    if not value:
        return None
    try:
        parsed = parse_datetime(value)
        if parsed is None:
            parsed = parse_date(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError({name: f"'{value}' is not a valid date or datetime."})
    if isinstance(parsed, datetime) and timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed
