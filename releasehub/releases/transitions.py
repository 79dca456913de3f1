"""
Release status transitions.

COMPLETED is the initial state and SHIPPED the terminal one. The first
tracking number recorded on a release ships it, whatever status the same
request asked for.
"""
from rest_framework.exceptions import ValidationError
from .models import Release

ALLOWED_STATUSES = (Release.STATUS_COMPLETED, Release.STATUS_SHIPPED)


def next_status(current_status, current_tracking, new_tracking=None, requested_status=None):
    if requested_status is not None and requested_status not in ALLOWED_STATUSES:
        raise ValidationError(f"Status must be one of {', '.join(ALLOWED_STATUSES)}")

    status = requested_status or current_status
    if new_tracking and not current_tracking:
        status = Release.STATUS_SHIPPED
    return status


def can_delete(release):
    return release.status != Release.STATUS_SHIPPED
