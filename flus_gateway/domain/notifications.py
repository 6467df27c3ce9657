"""Notification trigger evaluation for recurring obligations"""

from collections import Counter
from datetime import date, timedelta
from typing import AbstractSet, Iterable, List, Mapping, Optional, Sequence, Tuple
from flus_gateway.domain.cycles import calculate_cycle, cycle_start_for, sum_cycle_spend
from flus_gateway.domain.models import (
    CardConfig,
    EvaluationResult,
    InstrumentId,
    NotificationRequest,
    NotificationTrigger,
    RecurringPattern,
    Transaction,
    TriggerDirection,
    TriggerTarget,
    User,
)

# Applied when a pattern has no triggers of its own
DEFAULT_TRIGGERS: Tuple[NotificationTrigger, ...] = (
    NotificationTrigger(id="def1", days=1, direction=TriggerDirection.BEFORE, target=TriggerTarget.DUE_DATE),
    NotificationTrigger(id="def0", days=0, direction=TriggerDirection.ON_DAY, target=TriggerTarget.DUE_DATE),
)

DEFAULT_MAX_DAYS_AFTER_CLOSING = 31

CURRENCY_SYMBOLS = {"EUR": "€", "GBP": "£"}

SKIP_ALREADY_FIRED = "already_fired"
SKIP_UNRESOLVABLE = "unresolvable"
SKIP_OUT_OF_BOUNDS = "out_of_bounds"


def fire_key(pattern_id: str, trigger_id: str, today: date) -> str:
    """Dedup key: one firing per (pattern, trigger, calendar day)"""
    return f"{pattern_id}|{trigger_id}|{today.isoformat()}"


def triggers_for(pattern: RecurringPattern) -> Sequence[NotificationTrigger]:
    return pattern.notification_triggers or DEFAULT_TRIGGERS


def format_money(amount_cents: int, currency: str) -> str:
    symbol = CURRENCY_SYMBOLS.get(currency, "$")
    return f"{symbol}{amount_cents / 100:.2f}"


def closing_reference(pattern: RecurringPattern, card: CardConfig) -> date:
    """Date in the month of the cycle whose payment is pattern.next_due_date"""
    return pattern.next_due_date - timedelta(days=card.payment_due_gap)


def resolve_anchor_date(
    pattern: RecurringPattern,
    trigger: NotificationTrigger,
    card: Optional[CardConfig],
) -> Optional[date]:
    """
    Date the trigger offset is measured from, or None when it cannot be resolved.

    A closing-date anchor is inferred from the payment due date: the closing
    is roughly due - gap, then recomputed exactly (weekend shift, overrides).
    """
    if trigger.target == TriggerTarget.DUE_DATE:
        return pattern.next_due_date

    if card is None:
        return None

    return calculate_cycle(card, closing_reference(pattern, card)).closing_date


def trigger_date(anchor: date, trigger: NotificationTrigger) -> date:
    if trigger.direction == TriggerDirection.BEFORE:
        return anchor - timedelta(days=trigger.days)
    if trigger.direction == TriggerDirection.AFTER:
        return anchor + timedelta(days=trigger.days)
    return anchor


def compose_message(
    pattern: RecurringPattern,
    trigger: NotificationTrigger,
    anchor: date,
    card: Optional[CardConfig],
    transactions: Sequence[Transaction],
    recipient: Optional[User],
) -> Tuple[str, str]:
    """Title and body for a fired trigger"""
    name = pattern.display_title

    if trigger.target == TriggerTarget.CLOSING_DATE:
        if trigger.direction == TriggerDirection.AFTER:
            title = f"Card recently closed: {name}"
            if trigger.days == 1:
                body = "Your card closed yesterday."
            else:
                body = f"Your card closed {trigger.days} days ago."
            if card is not None:
                # anchor is the exact closing date of the cycle that just ended
                start = cycle_start_for(card, closing_reference(pattern, card))
                total = sum_cycle_spend(card, transactions, pattern.currency, start, anchor)
                body += f" Cycle total: {format_money(total, pattern.currency)}."
        else:
            title = f"Card closing soon: {name}"
            body = f"Your card closes in {trigger.days} days."
    elif trigger.direction == TriggerDirection.ON_DAY:
        title = f"Due today: {name}"
        body = f"Payment is due today. Estimated amount: {format_money(pattern.amount_cents, pattern.currency)}."
    elif trigger.direction == TriggerDirection.BEFORE:
        title = f"Upcoming payment: {name}"
        body = f"Due in {trigger.days} days. Pay on time to avoid interest."
    else:
        title = f"Overdue: {name}"
        body = f"Your payment was due {trigger.days} days ago."

    body += f" Assigned to: {recipient.name if recipient else 'Shared'}"
    return title, body


def evaluate_due(
    patterns: Iterable[RecurringPattern],
    users: Iterable[User],
    transactions: Iterable[Transaction],
    card_configs: Mapping[InstrumentId, CardConfig],
    today: date,
    fired_keys: AbstractSet[str] = frozenset(),
    max_days_after_closing: int = DEFAULT_MAX_DAYS_AFTER_CLOSING,
) -> EvaluationResult:
    """
    Decide which reminders fire today.

    A trigger fires only when today is exactly its trigger date and its key
    is not in fired_keys. The input set is left untouched; the returned
    fired_keys includes every key fired in this pass. Closing-date triggers
    on patterns without a linked card are skipped silently, and "after
    closing" triggers beyond max_days_after_closing never fire.
    """
    users_by_id = {u.user_id: u for u in users}
    history = list(transactions)
    fired = set(fired_keys)
    skipped: Counter = Counter()
    notifications: List[NotificationRequest] = []

    for pattern in patterns:
        card = card_configs.get(pattern.instrument) if pattern.instrument else None

        for index, trigger in enumerate(triggers_for(pattern)):
            trigger_id = trigger.id or str(index)
            key = fire_key(pattern.pattern_id, trigger_id, today)
            if key in fired:
                skipped[SKIP_ALREADY_FIRED] += 1
                continue

            if (
                trigger.target == TriggerTarget.CLOSING_DATE
                and trigger.direction == TriggerDirection.AFTER
                and trigger.days > max_days_after_closing
            ):
                skipped[SKIP_OUT_OF_BOUNDS] += 1
                continue

            anchor = resolve_anchor_date(pattern, trigger, card)
            if anchor is None:
                skipped[SKIP_UNRESOLVABLE] += 1
                continue

            if trigger_date(anchor, trigger) != today:
                continue

            recipient = users_by_id.get(pattern.user_id)
            title, body = compose_message(pattern, trigger, anchor, card, history, recipient)
            notifications.append(
                NotificationRequest(
                    pattern_id=pattern.pattern_id,
                    trigger_id=trigger_id,
                    fire_key=key,
                    title=title,
                    body=body,
                    recipient_user_id=pattern.user_id,
                    notification_method=recipient.notification_method if recipient else None,
                )
            )
            fired.add(key)

    return EvaluationResult(
        notifications=notifications,
        fired_keys=frozenset(fired),
        skipped=dict(skipped),
    )
