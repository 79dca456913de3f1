"""
Release, ticket and batch numbers.

The sequence is one past the highest ticket number issued so far, formatted
under today's date; it does not reset per day and deleted releases leave gaps.
Two concurrent creations can read the same value, so the caller relies on the
unique release_number column and retries with the next sequence.
"""
from django.utils import timezone

TICKET_PREFIX = 'TKT-'


def parse_ticket_number(ticket_number):
    """Sequence from ``TKT-00042``, or None for a blank or foreign value."""
    if not ticket_number or not ticket_number.startswith(TICKET_PREFIX):
        return None
    digits = ticket_number[len(TICKET_PREFIX):]
    return int(digits) if digits.isdigit() else None


def next_sequence():
    from .models import Release
    tickets = Release.objects.filter(ticket_number__startswith=TICKET_PREFIX).values_list('ticket_number', flat=True)
    issued = [seq for seq in map(parse_ticket_number, tickets) if seq is not None]
    return max(issued + [Release.objects.count()]) + 1


def format_release_number(sequence, on_date=None):
    on_date = on_date or timezone.localdate()
    return f"REL-{on_date:%Y%m%d}-{sequence:04d}"


def format_ticket_number(sequence):
    return f"{TICKET_PREFIX}{sequence:05d}"


def default_batch_number(part_number):
    return part_number[-4:]
