"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import date, datetime
from typing import Dict, List, Optional

from flus_gateway.domain.models import (
    CardConfig,
    CardDateOverride,
    ClosingRule,
    DuePattern,
    Frequency,
    InstrumentId,
    NotificationMethod,
    NotificationTrigger,
    RecurringPattern,
    Transaction,
    TransactionType,
    TriggerDirection,
    TriggerTarget,
    User,
)


def _instrument(value: Optional[str]) -> Optional[InstrumentId]:
    return InstrumentId(value) if value else None


# --- Shared entities ---


class CardDateOverrideSchema(BaseModel):
    """Manual closing/due dates for one month, in the persisted layout"""

    year: int = Field(..., ge=1900, le=9999)
    month: int = Field(..., ge=0, le=11, description="Month index 0-11 (January = 0)")
    closing_date: date
    due_date: date

    def to_domain(self) -> CardDateOverride:
        return CardDateOverride(
            year=self.year,
            month=self.month + 1,
            closing_date=self.closing_date,
            due_date=self.due_date,
        )


class CardConfigSchema(BaseModel):
    """Billing configuration of one payment instrument"""

    instrument: str = Field(..., min_length=1, description="Payment instrument name, e.g. 'Visa Gold'")
    closing_rule: ClosingRule = ClosingRule.FIXED
    closing_day: int = Field(1, ge=1, le=31)
    payment_due_gap: int = Field(0, ge=0, description="Days from closing to payment due date")
    overrides: List[CardDateOverrideSchema] = []
    bank_name: Optional[str] = None
    card_network: Optional[str] = None
    last4: Optional[str] = None
    limit_cents: Optional[int] = None
    color: Optional[str] = None

    @model_validator(mode="after")
    def check_unique_overrides(self) -> "CardConfigSchema":
        months = [(o.year, o.month) for o in self.overrides]
        if len(months) != len(set(months)):
            raise ValueError("At most one override per (year, month) is allowed")
        return self

    def to_domain(self) -> CardConfig:
        return CardConfig(
            instrument=InstrumentId(self.instrument),
            closing_rule=self.closing_rule,
            closing_day=self.closing_day,
            payment_due_gap=self.payment_due_gap,
            overrides=tuple(o.to_domain() for o in self.overrides),
            bank_name=self.bank_name,
            card_network=self.card_network,
            last4=self.last4,
            limit_cents=self.limit_cents,
            color=self.color,
        )


class TransactionSchema(BaseModel):
    """Historical transaction"""

    model_config = ConfigDict(from_attributes=True)

    transaction_id: str
    user_id: str
    type: TransactionType
    amount_cents: int
    currency: str = Field(..., min_length=3, max_length=3)
    timestamp: datetime
    instrument: Optional[str] = None
    description: str = ""
    title: Optional[str] = None
    category: str = ""
    notes: str = ""
    installment_current: Optional[int] = None
    installment_total: Optional[int] = None
    parent_id: Optional[str] = None

    def to_domain(self) -> Transaction:
        return Transaction(
            transaction_id=self.transaction_id,
            user_id=self.user_id,
            type=self.type,
            amount_cents=self.amount_cents,
            currency=self.currency,
            timestamp=self.timestamp,
            instrument=_instrument(self.instrument),
            description=self.description,
            title=self.title,
            category=self.category,
            notes=self.notes,
            installment_current=self.installment_current,
            installment_total=self.installment_total,
            parent_id=self.parent_id,
        )


class NotificationTriggerSchema(BaseModel):
    """Reminder rule; id defaults to the trigger's position in the list"""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    days: int = Field(0, ge=0)
    direction: TriggerDirection
    target: TriggerTarget = TriggerTarget.DUE_DATE


class RecurringPatternSchema(BaseModel):
    """Recurring income or expense"""

    model_config = ConfigDict(from_attributes=True)

    pattern_id: str
    user_id: str
    type: TransactionType
    amount_cents: int
    currency: str = Field(..., min_length=3, max_length=3)
    frequency: Frequency
    next_due_date: date
    description: str = ""
    title: Optional[str] = None
    category: str = ""
    due_pattern: DuePattern = DuePattern.FIXED
    day_of_month: Optional[int] = Field(None, ge=1, le=31)
    instrument: Optional[str] = None
    notification_triggers: List[NotificationTriggerSchema] = []
    notes: str = ""

    def to_domain(self) -> RecurringPattern:
        return RecurringPattern(
            pattern_id=self.pattern_id,
            user_id=self.user_id,
            type=self.type,
            amount_cents=self.amount_cents,
            currency=self.currency,
            frequency=self.frequency,
            next_due_date=self.next_due_date,
            description=self.description,
            title=self.title,
            category=self.category,
            due_pattern=self.due_pattern,
            day_of_month=self.day_of_month,
            instrument=_instrument(self.instrument),
            notification_triggers=tuple(
                NotificationTrigger(
                    id=t.id or str(index),
                    days=t.days,
                    direction=t.direction,
                    target=t.target,
                )
                for index, t in enumerate(self.notification_triggers)
            ),
            notes=self.notes,
        )


class UserSchema(BaseModel):
    """Family member"""

    user_id: str
    name: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    notification_method: NotificationMethod = NotificationMethod.EMAIL

    def to_domain(self) -> User:
        return User(
            user_id=self.user_id,
            name=self.name,
            email=self.email,
            phone_number=self.phone_number,
            notification_method=self.notification_method,
        )


# --- Cards ---


class CycleRequest(BaseModel):
    """Request body for POST /v1/cards/cycle"""

    card: CardConfigSchema
    reference_date: date


class CycleResponse(BaseModel):
    """Response for POST /v1/cards/cycle"""

    closing_date: date
    due_date: date


class CardStatusRequest(BaseModel):
    """Request body for POST /v1/cards/status"""

    card: CardConfigSchema
    transactions: List[TransactionSchema] = []
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    today: Optional[date] = None


class CardStatusResponse(BaseModel):
    """Response for POST /v1/cards/status"""

    instrument: str
    currency: str
    cycle_start: date
    closing_date: date
    due_date: date
    current_spend_cents: int
    days_to_close: int


# --- Recurring ---


class AdvanceRequest(BaseModel):
    """Request body for POST /v1/recurring/advance"""

    pattern: RecurringPatternSchema
    mark_paid: bool = Field(..., description="True records a payment, False skips the occurrence")
    now: Optional[datetime] = None


class AdvanceResponse(BaseModel):
    """Response for POST /v1/recurring/advance"""

    pattern: RecurringPatternSchema
    transaction: Optional[TransactionSchema] = None


class AnchorRequest(BaseModel):
    """Request body for POST /v1/recurring/anchor"""

    frequency: Frequency
    due_pattern: DuePattern = DuePattern.FIXED
    due_date: date


class AnchorResponse(BaseModel):
    """Response for POST /v1/recurring/anchor"""

    day_of_month: Optional[int] = None


# --- Notifications ---


class EvaluateRequest(BaseModel):
    """Request body for POST /v1/notifications/evaluate"""

    session_id: str = Field(..., min_length=1, description="Client session owning the fire-record")
    patterns: List[RecurringPatternSchema] = []
    users: List[UserSchema] = []
    transactions: List[TransactionSchema] = []
    cards: Dict[str, CardConfigSchema] = Field(default_factory=dict, description="Card configs keyed by instrument")
    today: Optional[date] = None

    @model_validator(mode="after")
    def check_card_keys(self) -> "EvaluateRequest":
        # Spend is matched on card.instrument, so the key must name the same card
        mismatched = sorted(key for key, card in self.cards.items() if key != card.instrument)
        if mismatched:
            raise ValueError(f"Card keys must equal the card instrument: {', '.join(mismatched)}")
        return self


class NotificationSchema(BaseModel):
    """Single delivery request"""

    model_config = ConfigDict(from_attributes=True)

    pattern_id: str
    trigger_id: str
    fire_key: str
    title: str
    body: str
    recipient_user_id: str
    notification_method: Optional[NotificationMethod] = None


class EvaluateResponse(BaseModel):
    """Response for POST /v1/notifications/evaluate"""

    session_id: str
    notifications: List[NotificationSchema]
    fired_keys: List[str]


class ClearSessionResponse(BaseModel):
    """Response for DELETE /v1/notifications/sessions/{session_id}"""

    session_id: str
    cleared: int


# --- Installments ---


class InstallmentPlanRequest(BaseModel):
    """Request body for POST /v1/installments/plan"""

    amount_cents: int = Field(..., gt=0, description="Purchase amount in cents")
    installments: int = Field(1, ge=1, le=120)
    start_date: Optional[date] = None
    interest_rate: float = Field(0.0, ge=0, description="Flat interest in percent")


class InstallmentSchema(BaseModel):
    """Single installment in a plan"""

    model_config = ConfigDict(from_attributes=True)

    number: int
    total: int
    due_date: date
    amount_cents: int


class InstallmentPlanResponse(BaseModel):
    """Response for POST /v1/installments/plan"""

    total_cents: int
    installments: List[InstallmentSchema]
