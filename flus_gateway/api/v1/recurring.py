"""POST /v1/recurring/* - recurring pattern endpoints"""

from fastapi import APIRouter, Request

from flus_gateway.api.v1.schemas import (
    AdvanceRequest,
    AdvanceResponse,
    AnchorRequest,
    AnchorResponse,
    RecurringPatternSchema,
    TransactionSchema,
)
from flus_gateway.api.dependencies import get_request_id
from flus_gateway.domain.recurring import advance_recurring, derive_anchor_day
from flus_gateway.infrastructure.observability.logging import log_advance
from flus_gateway.infrastructure.observability.metrics import record_advance

router = APIRouter()


@router.post("/recurring/advance", response_model=AdvanceResponse)
def advance_pattern(request_body: AdvanceRequest, request: Request):
    """
    Mark the current occurrence paid (records a transaction) or skip it.

    Returns the pattern with its next due date moved forward. The caller
    stores the result; sending the same request twice advances twice.
    """
    pattern, transaction = advance_recurring(
        request_body.pattern.to_domain(),
        mark_paid=request_body.mark_paid,
        now=request_body.now,
    )

    record_advance(request_body.mark_paid)
    log_advance(get_request_id(request), pattern.pattern_id, request_body.mark_paid, pattern.next_due_date.isoformat())

    return AdvanceResponse(
        pattern=RecurringPatternSchema.model_validate(pattern, from_attributes=True),
        transaction=TransactionSchema.model_validate(transaction, from_attributes=True) if transaction else None,
    )


@router.post("/recurring/anchor", response_model=AnchorResponse)
def anchor_day(request_body: AnchorRequest):
    """Anchor day-of-month to store when saving a pattern"""
    return AnchorResponse(
        day_of_month=derive_anchor_day(request_body.frequency, request_body.due_pattern, request_body.due_date)
    )
