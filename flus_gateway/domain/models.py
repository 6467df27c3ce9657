"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, FrozenSet, List, NewType, Optional, Tuple

from flus_gateway.domain.exceptions import InvalidCardConfigError

# Opaque payment instrument key (e.g. "Visa Gold"), resolved at the API boundary
InstrumentId = NewType("InstrumentId", str)


class ClosingRule(str, Enum):
    FIXED = "fixed"
    LAST_BUSINESS_DAY = "last_business_day"


class Frequency(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class DuePattern(str, Enum):
    FIXED = "fixed"
    RELATIVE = "relative"
    LAST_WORKDAY = "last_workday"


class TriggerDirection(str, Enum):
    BEFORE = "before"
    AFTER = "after"
    ON_DAY = "on_day"


class TriggerTarget(str, Enum):
    DUE_DATE = "due_date"
    CLOSING_DATE = "closing_date"


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class NotificationMethod(str, Enum):
    EMAIL = "email"
    WHATSAPP = "whatsapp"
    SMS = "sms"
    BOTH = "both"


@dataclass(frozen=True)
class CardDateOverride:
    """Explicit closing/due dates for one (year, month); month is 1-12"""

    year: int
    month: int
    closing_date: date
    due_date: date


@dataclass
class CardConfig:
    """Billing rules for one credit or debit instrument"""

    instrument: InstrumentId
    closing_rule: ClosingRule = ClosingRule.FIXED
    closing_day: int = 1  # only used when closing_rule is FIXED
    payment_due_gap: int = 0  # calendar days from closing to due
    overrides: Tuple[CardDateOverride, ...] = ()

    # Presentation only, unused by cycle math
    bank_name: Optional[str] = None
    card_network: Optional[str] = None
    last4: Optional[str] = None
    limit_cents: Optional[int] = None
    color: Optional[str] = None

    def __post_init__(self) -> None:
        seen = set()
        for override in self.overrides:
            key = (override.year, override.month)
            if key in seen:
                raise InvalidCardConfigError(
                    f"Duplicate override for {override.year}-{override.month:02d} on {self.instrument}"
                )
            seen.add(key)

    def override_for(self, year: int, month: int) -> Optional[CardDateOverride]:
        for override in self.overrides:
            if override.year == year and override.month == month:
                return override
        return None


@dataclass(frozen=True)
class Transaction:
    """Historical money movement; never mutated by the engine"""

    transaction_id: str
    user_id: str
    type: TransactionType
    amount_cents: int
    currency: str
    timestamp: datetime
    instrument: Optional[InstrumentId] = None
    description: str = ""
    title: Optional[str] = None
    category: str = ""
    notes: str = ""
    installment_current: Optional[int] = None
    installment_total: Optional[int] = None
    parent_id: Optional[str] = None


@dataclass(frozen=True)
class NotificationTrigger:
    """Reminder rule relative to a due or closing date"""

    id: str
    days: int
    direction: TriggerDirection
    target: TriggerTarget = TriggerTarget.DUE_DATE


@dataclass
class RecurringPattern:
    """Template for a repeating income or expense"""

    pattern_id: str
    user_id: str
    type: TransactionType
    amount_cents: int
    currency: str
    frequency: Frequency
    next_due_date: date
    description: str = ""
    title: Optional[str] = None
    category: str = ""
    due_pattern: DuePattern = DuePattern.FIXED
    day_of_month: Optional[int] = None  # anchor for monthly fixed schedules
    instrument: Optional[InstrumentId] = None
    notification_triggers: Tuple[NotificationTrigger, ...] = ()
    notes: str = ""

    @property
    def display_title(self) -> str:
        return self.title or self.description


@dataclass(frozen=True)
class User:
    """Family member receiving notifications"""

    user_id: str
    name: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    notification_method: NotificationMethod = NotificationMethod.EMAIL


@dataclass(frozen=True)
class Cycle:
    """Closing and payment-due dates of one billing cycle"""

    closing_date: date
    due_date: date


@dataclass(frozen=True)
class CardStatus:
    """Active billing cycle of a card with its accumulated spend"""

    cycle_start: date
    closing_date: date
    due_date: date
    current_spend_cents: int
    days_to_close: int


@dataclass(frozen=True)
class NotificationRequest:
    """Notification ready for the delivery layer"""

    pattern_id: str
    trigger_id: str
    fire_key: str
    title: str
    body: str
    recipient_user_id: str
    notification_method: Optional[NotificationMethod] = None


@dataclass(frozen=True)
class Installment:
    """Single payment in an installment plan"""

    number: int
    total: int
    due_date: date
    amount_cents: int


@dataclass
class EvaluationResult:
    """Output of a notification evaluation pass"""

    notifications: List[NotificationRequest] = field(default_factory=list)
    fired_keys: FrozenSet[str] = frozenset()
    skipped: Dict[str, int] = field(default_factory=dict)  # reason -> count
