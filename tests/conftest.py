"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from flus_gateway.api.main import create_app
from flus_gateway.api.dependencies import get_delivery_client
from flus_gateway.infrastructure.database.models import Base
from flus_gateway.infrastructure.database.session import get_db
from flus_gateway.domain.models import (
    CardConfig,
    ClosingRule,
    Frequency,
    InstrumentId,
    RecurringPattern,
    Transaction,
    TransactionType,
    User,
)


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

VISA = InstrumentId("Visa Gold")


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database and no delivery webhook"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_delivery_client] = lambda: None
    return TestClient(app)


@pytest.fixture
def visa_card() -> CardConfig:
    """Card closing on the 25th, payment due 10 days later"""
    return CardConfig(
        instrument=VISA,
        closing_rule=ClosingRule.FIXED,
        closing_day=25,
        payment_due_gap=10,
    )


@pytest.fixture
def ana() -> User:
    return User(user_id="u1", name="Ana")


@pytest.fixture
def rent_pattern() -> RecurringPattern:
    """Monthly rent due on the 10th"""
    return RecurringPattern(
        pattern_id="p-rent",
        user_id="u1",
        type=TransactionType.EXPENSE,
        amount_cents=120000,
        currency="USD",
        frequency=Frequency.MONTHLY,
        next_due_date=date(2025, 3, 10),
        description="Rent",
        title="Apartment rent",
        day_of_month=10,
    )


@pytest.fixture
def make_expense():
    """Factory for card transactions (expense on the Visa by default)"""

    def _make(
        transaction_id: str,
        when: datetime,
        amount_cents: int,
        currency: str = "USD",
        instrument: InstrumentId | None = VISA,
        type: TransactionType = TransactionType.EXPENSE,
    ) -> Transaction:
        return Transaction(
            transaction_id=transaction_id,
            user_id="u1",
            type=type,
            amount_cents=amount_cents,
            currency=currency,
            timestamp=when,
            instrument=instrument,
            description="Purchase",
            category="shopping",
        )

    return _make
