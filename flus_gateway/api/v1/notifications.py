"""POST /v1/notifications/evaluate - reminder evaluation endpoint"""

import time
import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, BackgroundTasks, Request
from sqlalchemy.orm import Session

from flus_gateway.api.v1.schemas import (
    ClearSessionResponse,
    EvaluateRequest,
    EvaluateResponse,
    NotificationSchema,
)
from flus_gateway.api.dependencies import get_delivery_client, get_request_id, get_today
from flus_gateway.config import settings
from flus_gateway.domain.models import InstrumentId
from flus_gateway.domain.notifications import evaluate_due
from flus_gateway.infrastructure.clients.delivery import DeliveryClient
from flus_gateway.infrastructure.database.repositories import FiredNotificationRepository
from flus_gateway.infrastructure.database.session import get_db
from flus_gateway.infrastructure.observability.logging import log_evaluation
from flus_gateway.infrastructure.observability.metrics import record_evaluation

router = APIRouter()


@router.post("/notifications/evaluate", response_model=EvaluateResponse)
def evaluate_notifications(
    request_body: EvaluateRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    delivery_client: Optional[DeliveryClient] = Depends(get_delivery_client),
    today: date = Depends(get_today),
):
    """
    Evaluate reminder triggers for today and fire the ones that match.

    Flow:
    1. Load the session's fire-record
    2. Evaluate every pattern's triggers against today
    3. Persist newly fired keys so the session never sees a duplicate
    4. Schedule delivery through the webhook (when configured)
    5. Return the fired notifications and the updated fire-record
    """
    start_time = time.time()
    request_id = get_request_id(request)
    today = request_body.today or today

    try:
        repo = FiredNotificationRepository(db)
        fired_keys = repo.get_fired_keys(request_body.session_id)

        # Instrument names are resolved to ids once, here
        cards = {InstrumentId(name): card.to_domain() for name, card in request_body.cards.items()}

        result = evaluate_due(
            patterns=[p.to_domain() for p in request_body.patterns],
            users=[u.to_domain() for u in request_body.users],
            transactions=[t.to_domain() for t in request_body.transactions],
            card_configs=cards,
            today=today,
            fired_keys=fired_keys,
            max_days_after_closing=settings.max_days_after_closing,
        )

        repo.record(request_body.session_id, today, result.notifications)
        db.commit()

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    if delivery_client is not None and result.notifications:
        background_tasks.add_task(delivery_client.send_all, result.notifications)

    duration_ms = (time.time() - start_time) * 1000
    record_evaluation(result.notifications, result.skipped)
    log_evaluation(request_id, request_body.session_id, len(result.notifications), result.skipped, duration_ms)

    return EvaluateResponse(
        session_id=request_body.session_id,
        notifications=[NotificationSchema.model_validate(n, from_attributes=True) for n in result.notifications],
        fired_keys=sorted(result.fired_keys),
    )


@router.delete("/notifications/sessions/{session_id}", response_model=ClearSessionResponse)
def clear_session(session_id: str, db: Session = Depends(get_db)):
    """End a session: forget its fired notifications so a new session starts clean"""
    cleared = FiredNotificationRepository(db).clear_session(session_id)
    db.commit()
    return ClearSessionResponse(session_id=session_id, cleared=cleared)
