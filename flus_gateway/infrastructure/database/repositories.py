"""Data access layer for the notification fire-record"""

from datetime import date
from typing import Iterable, Set
from sqlalchemy.orm import Session
from flus_gateway.infrastructure.database.models import FiredNotification
from flus_gateway.domain.models import NotificationRequest


class FiredNotificationRepository:
    """Repository for per-session fired notification keys"""

    def __init__(self, db: Session):
        self.db = db

    def get_fired_keys(self, session_id: str) -> Set[str]:
        """All fire keys recorded for a session"""
        rows = (
            self.db.query(FiredNotification.fire_key)
            .filter(FiredNotification.session_id == session_id)
            .all()
        )
        return {row.fire_key for row in rows}

    def record(self, session_id: str, fired_on: date, notifications: Iterable[NotificationRequest]) -> None:
        """Persist newly fired notifications (caller commits)"""
        for notification in notifications:
            self.db.add(
                FiredNotification(
                    session_id=session_id,
                    fire_key=notification.fire_key,
                    pattern_id=notification.pattern_id,
                    trigger_id=notification.trigger_id,
                    recipient_user_id=notification.recipient_user_id,
                    fired_on=fired_on,
                )
            )
        self.db.flush()

    def clear_session(self, session_id: str) -> int:
        """Drop a session's fire-record, returning the number of keys removed"""
        return (
            self.db.query(FiredNotification)
            .filter(FiredNotification.session_id == session_id)
            .delete(synchronize_session=False)
        )
