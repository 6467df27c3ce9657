"""SQLAlchemy ORM models for the notification fire-record"""

import uuid
from sqlalchemy import Column, Date, DateTime, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class FiredNotification(Base):
    """One reminder fired within a client session, used to suppress duplicates"""

    __tablename__ = "fired_notification"
    __table_args__ = (UniqueConstraint("session_id", "fire_key", name="uq_fired_notification_session_key"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(Text, nullable=False, index=True)
    fire_key = Column(Text, nullable=False)
    pattern_id = Column(Text, nullable=False)
    trigger_id = Column(Text, nullable=False)
    recipient_user_id = Column(Text, nullable=False)
    fired_on = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
