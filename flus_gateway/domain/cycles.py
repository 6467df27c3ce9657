"""Credit card billing cycle calculation and card status aggregation"""

from datetime import date, timedelta
from typing import Iterable
from dateutil.relativedelta import relativedelta
from flus_gateway.domain.models import (
    CardConfig,
    CardStatus,
    ClosingRule,
    Cycle,
    Transaction,
    TransactionType,
)
from flus_gateway.utils.date_utils import (
    adjust_to_business_day,
    clamp_day,
    last_business_day_of_month,
)

# Day used when stepping between months, far from any month-length edge
MID_MONTH_DAY = 15


def calculate_cycle(config: CardConfig, reference_date: date) -> Cycle:
    """
    Closing and due dates of the cycle that closes in reference_date's month.

    Rules, in order:
    - A manual override for (year, month) wins verbatim (no weekend shift).
    - last_business_day: last day of month, moved back to Friday if weekend.
    - fixed: closing_day clamped to the month length, moved back to Friday if weekend.

    The due date is closing + payment_due_gap calendar days, never shifted.
    """
    year, month = reference_date.year, reference_date.month

    override = config.override_for(year, month)
    if override is not None:
        return Cycle(closing_date=override.closing_date, due_date=override.due_date)

    if config.closing_rule == ClosingRule.LAST_BUSINESS_DAY:
        closing_date = last_business_day_of_month(year, month)
    else:
        closing_date = adjust_to_business_day(clamp_day(year, month, config.closing_day))

    return Cycle(
        closing_date=closing_date,
        due_date=closing_date + timedelta(days=config.payment_due_gap),
    )


def _months_away(reference_date: date, months: int) -> date:
    return reference_date.replace(day=MID_MONTH_DAY) + relativedelta(months=months)


def cycle_start_for(config: CardConfig, reference_date: date) -> date:
    """
    First day of the cycle closing in reference_date's month (previous closing + 1 day).

    Takes the cycle's month rather than its closing date: a closing on the 1st
    that falls on a weekend moves back into the previous calendar month.
    """
    previous = calculate_cycle(config, _months_away(reference_date, -1))
    return previous.closing_date + timedelta(days=1)


def sum_cycle_spend(
    config: CardConfig,
    transactions: Iterable[Transaction],
    currency: str,
    start: date,
    end: date,
) -> int:
    """Total expense cents charged to the card in [start, end], one currency only"""
    return sum(
        t.amount_cents
        for t in transactions
        if t.type == TransactionType.EXPENSE
        and t.currency == currency
        and t.instrument == config.instrument
        and start <= t.timestamp.date() <= end
    )


def get_card_status(
    config: CardConfig,
    transactions: Iterable[Transaction],
    currency: str,
    today: date,
) -> CardStatus:
    """
    Active cycle of a card as seen on `today`, with the spend accumulated so far.

    Once this month's closing date has passed, the active cycle is the one
    closing next month (e.g. closes Jan 25, today Jan 26 -> active closes Feb 25).
    """
    reference = today
    cycle = calculate_cycle(config, reference)
    if today > cycle.closing_date:
        reference = _months_away(today, 1)
        cycle = calculate_cycle(config, reference)

    cycle_start = cycle_start_for(config, reference)
    current_spend = sum_cycle_spend(config, transactions, currency, cycle_start, cycle.closing_date)

    return CardStatus(
        cycle_start=cycle_start,
        closing_date=cycle.closing_date,
        due_date=cycle.due_date,
        current_spend_cents=current_spend,
        days_to_close=(cycle.closing_date - today).days,
    )
