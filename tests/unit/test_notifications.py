"""Unit tests for notification trigger evaluation"""

import pytest
from dataclasses import replace
from datetime import date, datetime
from flus_gateway.domain.models import (
    CardConfig,
    InstrumentId,
    NotificationMethod,
    NotificationTrigger,
    RecurringPattern,
    TriggerDirection,
    TriggerTarget,
    User,
)
from flus_gateway.domain.notifications import (
    SKIP_ALREADY_FIRED,
    SKIP_OUT_OF_BOUNDS,
    SKIP_UNRESOLVABLE,
    evaluate_due,
    fire_key,
    format_money,
)

VISA = InstrumentId("Visa Gold")


@pytest.fixture
def card_bill(rent_pattern: RecurringPattern) -> RecurringPattern:
    """Visa statement payment due Mar 7 2025 (Feb 25 closing + 10 days)"""
    return replace(
        rent_pattern,
        pattern_id="p-visa",
        title="Visa statement",
        amount_cents=0,
        next_due_date=date(2025, 3, 7),
        day_of_month=None,
        instrument=VISA,
        notification_triggers=(
            NotificationTrigger(id="c3", days=3, direction=TriggerDirection.BEFORE, target=TriggerTarget.CLOSING_DATE),
            NotificationTrigger(id="c1", days=1, direction=TriggerDirection.AFTER, target=TriggerTarget.CLOSING_DATE),
        ),
    )


def test_default_triggers_day_before(rent_pattern: RecurringPattern, ana: User):
    result = evaluate_due([rent_pattern], [ana], [], {}, date(2025, 3, 9))

    assert len(result.notifications) == 1
    notification = result.notifications[0]
    assert notification.trigger_id == "def1"
    assert notification.title == "Upcoming payment: Apartment rent"
    assert notification.body == "Due in 1 days. Pay on time to avoid interest. Assigned to: Ana"
    assert notification.recipient_user_id == "u1"
    assert notification.notification_method == NotificationMethod.EMAIL


def test_default_triggers_on_due_day(rent_pattern: RecurringPattern, ana: User):
    result = evaluate_due([rent_pattern], [ana], [], {}, date(2025, 3, 10))

    assert [n.trigger_id for n in result.notifications] == ["def0"]
    assert result.notifications[0].title == "Due today: Apartment rent"
    assert "Estimated amount: $1200.00." in result.notifications[0].body


def test_nothing_fires_outside_exact_day(rent_pattern: RecurringPattern, ana: User):
    for today in (date(2025, 3, 8), date(2025, 3, 11)):
        result = evaluate_due([rent_pattern], [ana], [], {}, today)
        assert result.notifications == []


def test_dedup_across_evaluations(rent_pattern: RecurringPattern, ana: User):
    today = date(2025, 3, 10)

    first = evaluate_due([rent_pattern], [ana], [], {}, today)
    second = evaluate_due([rent_pattern], [ana], [], {}, today, fired_keys=first.fired_keys)

    assert len(first.notifications) == 1
    assert second.notifications == []
    assert second.skipped[SKIP_ALREADY_FIRED] == 1
    assert second.fired_keys == first.fired_keys


def test_fired_keys_input_not_mutated(rent_pattern: RecurringPattern, ana: User):
    previous = {"other|def0|2025-03-09"}

    result = evaluate_due([rent_pattern], [ana], [], {}, date(2025, 3, 10), fired_keys=previous)

    assert previous == {"other|def0|2025-03-09"}
    assert result.fired_keys == {"other|def0|2025-03-09", fire_key("p-rent", "def0", date(2025, 3, 10))}


def test_same_trigger_fires_again_next_day(rent_pattern: RecurringPattern, ana: User):
    pattern = replace(
        rent_pattern,
        notification_triggers=(NotificationTrigger(id="t", days=0, direction=TriggerDirection.ON_DAY),),
    )
    first = evaluate_due([pattern], [ana], [], {}, date(2025, 3, 10))
    moved = replace(pattern, next_due_date=date(2025, 3, 11))

    second = evaluate_due([moved], [ana], [], {}, date(2025, 3, 11), fired_keys=first.fired_keys)

    assert len(second.notifications) == 1


def test_overdue_trigger(rent_pattern: RecurringPattern, ana: User):
    pattern = replace(
        rent_pattern,
        notification_triggers=(NotificationTrigger(id="late", days=2, direction=TriggerDirection.AFTER),),
    )

    result = evaluate_due([pattern], [ana], [], {}, date(2025, 3, 12))

    assert result.notifications[0].title == "Overdue: Apartment rent"
    assert result.notifications[0].body == "Your payment was due 2 days ago. Assigned to: Ana"


def test_unknown_user_is_shared(rent_pattern: RecurringPattern):
    result = evaluate_due([rent_pattern], [], [], {}, date(2025, 3, 10))

    assert result.notifications[0].body.endswith("Assigned to: Shared")
    assert result.notifications[0].notification_method is None


def test_closing_soon_trigger(card_bill: RecurringPattern, visa_card: CardConfig, ana: User):
    result = evaluate_due([card_bill], [ana], [], {VISA: visa_card}, date(2025, 2, 22))

    assert [n.trigger_id for n in result.notifications] == ["c3"]
    assert result.notifications[0].title == "Card closing soon: Visa statement"
    assert result.notifications[0].body == "Your card closes in 3 days. Assigned to: Ana"


def test_closing_trigger_uses_business_day_closing(card_bill: RecurringPattern, visa_card: CardConfig, ana: User):
    """Due Feb 3 2025 implies closing Jan 24 (the 25th was a Saturday)"""
    pattern = replace(
        card_bill,
        next_due_date=date(2025, 2, 3),
        notification_triggers=(
            NotificationTrigger(id="close", days=0, direction=TriggerDirection.ON_DAY, target=TriggerTarget.CLOSING_DATE),
        ),
    )

    assert evaluate_due([pattern], [ana], [], {VISA: visa_card}, date(2025, 1, 25)).notifications == []
    assert len(evaluate_due([pattern], [ana], [], {VISA: visa_card}, date(2025, 1, 24)).notifications) == 1


def test_recently_closed_includes_cycle_total(
    card_bill: RecurringPattern, visa_card: CardConfig, ana: User, make_expense
):
    transactions = [
        make_expense("t1", datetime(2025, 2, 10, 12, 0), 1250),
        make_expense("t2", datetime(2025, 1, 30, 9, 0), 750),
        make_expense("after-close", datetime(2025, 2, 26, 8, 0), 999),
        make_expense("before-start", datetime(2025, 1, 24, 20, 0), 500),
        make_expense("eur", datetime(2025, 2, 1), 300, currency="EUR"),
    ]

    result = evaluate_due([card_bill], [ana], transactions, {VISA: visa_card}, date(2025, 2, 26))

    assert [n.trigger_id for n in result.notifications] == ["c1"]
    assert result.notifications[0].title == "Card recently closed: Visa statement"
    assert result.notifications[0].body == "Your card closed yesterday. Cycle total: $20.00. Assigned to: Ana"


def test_closing_trigger_without_card_is_skipped(card_bill: RecurringPattern, ana: User):
    for pattern in (card_bill, replace(card_bill, instrument=None)):
        result = evaluate_due([pattern], [ana], [], {}, date(2025, 2, 22))

        assert result.notifications == []
        assert result.skipped[SKIP_UNRESOLVABLE] == 2


def test_after_closing_bound(card_bill: RecurringPattern, visa_card: CardConfig, ana: User):
    pattern = replace(
        card_bill,
        notification_triggers=(
            NotificationTrigger(id="late", days=40, direction=TriggerDirection.AFTER, target=TriggerTarget.CLOSING_DATE),
        ),
    )
    today = date(2025, 4, 6)  # Feb 25 + 40 days

    bounded = evaluate_due([pattern], [ana], [], {VISA: visa_card}, today)
    relaxed = evaluate_due([pattern], [ana], [], {VISA: visa_card}, today, max_days_after_closing=60)

    assert bounded.notifications == []
    assert bounded.skipped[SKIP_OUT_OF_BOUNDS] == 1
    assert len(relaxed.notifications) == 1
    assert relaxed.notifications[0].body.startswith("Your card closed 40 days ago.")


def test_trigger_without_id_uses_position(rent_pattern: RecurringPattern, ana: User):
    pattern = replace(
        rent_pattern,
        notification_triggers=(NotificationTrigger(id="", days=0, direction=TriggerDirection.ON_DAY),),
    )

    result = evaluate_due([pattern], [ana], [], {}, date(2025, 3, 10))

    assert result.notifications[0].fire_key == "p-rent|0|2025-03-10"


def test_format_money_symbols():
    assert format_money(1999, "EUR") == "€19.99"
    assert format_money(500, "GBP") == "£5.00"
    assert format_money(120000, "ARS") == "$1200.00"


def test_recently_closed_total_when_closing_moved_into_previous_month(
    card_bill: RecurringPattern, visa_card: CardConfig, ana: User, make_expense
):
    """Closing day 1: February's cycle closes Fri Jan 31, payment due Feb 10"""
    card = replace(visa_card, closing_day=1)
    pattern = replace(card_bill, next_due_date=date(2025, 2, 10))
    transactions = [
        make_expense("previous-cycle", datetime(2024, 12, 20, 9, 0), 9999),
        make_expense("in-cycle", datetime(2025, 1, 15, 9, 0), 1500),
    ]

    result = evaluate_due([pattern], [ana], transactions, {VISA: card}, date(2025, 2, 1))

    assert [n.trigger_id for n in result.notifications] == ["c1"]
    assert result.notifications[0].body == "Your card closed yesterday. Cycle total: $15.00. Assigned to: Ana"
