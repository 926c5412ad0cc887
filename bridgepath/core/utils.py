"""Utility functions for audit logging, request parsing and rounding"""
import logging
from datetime import datetime, timedelta

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (create, update, delete, assign, etc.)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object
    """
    try:
        audit_user = None
        if user:
            audit_user = user
        elif request and hasattr(request, 'user'):
            audit_user = request.user

        ip_address = get_client_ip(request) if request else None

        if not action or not model_name or not object_id:
            logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
            return None

        return AuditLog.objects.create(
            user=audit_user if audit_user and audit_user.is_authenticated else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            changes=changes or {},
            ip_address=ip_address
        )
    except Exception as e:
        # Don't fail the main operation if audit logging fails
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def round2(value):
    return round(float(value or 0), 2)


def parse_day(value):
    """Parse a YYYY-MM-DD or ISO datetime string into a date, or None."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    text = str(value)
    parsed = parse_date(text[:10]) if len(text) >= 10 else None
    if parsed is None:
        moment = parse_datetime(text)
        parsed = moment.date() if moment else None
    return parsed


def resolve_date_range(date_range, default_days=30):
    """
    Resolve a ``{"start": ..., "end": ...}`` payload into a pair of dates.

    Missing values default to the last ``default_days`` days ending today.
    """
    date_range = date_range or {}
    end_day = parse_day(date_range.get('end')) or timezone.localdate()
    start_day = parse_day(date_range.get('start')) or (end_day - timedelta(days=default_days))
    if start_day > end_day:
        start_day, end_day = end_day, start_day
    return start_day, end_day


def format_display_date(value):
    """Mon D, YYYY"""
    if not value:
        return '-'
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def weekdays_between(start_day, end_day):
    """Count Monday-Friday dates in the inclusive range."""
    if start_day > end_day:
        return 0
    count = 0
    current = start_day
    while current <= end_day:
        if current.weekday() < 5:
            count += 1
        current += timedelta(days=1)
    return count
