"""Recurring pattern advancement (mark paid / skip)"""

import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional, Tuple
from dateutil.relativedelta import relativedelta
from flus_gateway.domain.models import (
    DuePattern,
    Frequency,
    RecurringPattern,
    Transaction,
)

PAID_FROM_RECURRING_NOTE = "Paid from recurring"


def derive_anchor_day(frequency: Frequency, due_pattern: DuePattern, due_date: date) -> Optional[int]:
    """Anchor day-of-month stored when a monthly fixed pattern is created or edited"""
    if frequency == Frequency.MONTHLY and due_pattern == DuePattern.FIXED:
        return due_date.day
    return None


def next_due_date(pattern: RecurringPattern) -> date:
    """
    Occurrence following pattern.next_due_date.

    Monthly fixed patterns with an anchor day snap back onto it, so a date
    that was clamped (Feb 28) or moved by hand returns to the anchor next month.
    """
    current = pattern.next_due_date

    if pattern.frequency == Frequency.WEEKLY:
        return current + timedelta(days=7)

    if pattern.frequency == Frequency.YEARLY:
        return current + relativedelta(years=+1)

    if pattern.due_pattern == DuePattern.FIXED and pattern.day_of_month:
        # day= is applied after the month step and clamps to the month length
        return current + relativedelta(months=+1, day=pattern.day_of_month)
    return current + relativedelta(months=+1)


def advance_recurring(
    pattern: RecurringPattern,
    mark_paid: bool,
    now: datetime | None = None,
) -> Tuple[RecurringPattern, Optional[Transaction]]:
    """
    Resolve the current occurrence and move the pattern to the next one.

    Paying emits a transaction mirroring the pattern; skipping does not.
    Only next_due_date changes on the returned copy. Every call advances once,
    so callers must guard against double submission.
    """
    transaction = None
    if mark_paid:
        transaction = Transaction(
            transaction_id=str(uuid.uuid4()),
            user_id=pattern.user_id,
            type=pattern.type,
            amount_cents=pattern.amount_cents,
            currency=pattern.currency,
            timestamp=now or datetime.now(),
            instrument=pattern.instrument,
            description=pattern.description,
            title=pattern.title,
            category=pattern.category,
            notes=PAID_FROM_RECURRING_NOTE,
        )

    return replace(pattern, next_due_date=next_due_date(pattern)), transaction
