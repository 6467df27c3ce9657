"""POST /v1/cards/cycle and /v1/cards/status - billing cycle endpoints"""

from datetime import date
from fastapi import APIRouter, Depends

from flus_gateway.api.v1.schemas import (
    CycleRequest,
    CycleResponse,
    CardStatusRequest,
    CardStatusResponse,
)
from flus_gateway.api.dependencies import get_today
from flus_gateway.config import settings
from flus_gateway.domain.cycles import calculate_cycle, get_card_status

router = APIRouter()


@router.post("/cards/cycle", response_model=CycleResponse)
def compute_cycle(request_body: CycleRequest):
    """Closing and due dates of the cycle closing in the reference date's month"""
    cycle = calculate_cycle(request_body.card.to_domain(), request_body.reference_date)
    return CycleResponse(closing_date=cycle.closing_date, due_date=cycle.due_date)


@router.post("/cards/status", response_model=CardStatusResponse)
def card_status(request_body: CardStatusRequest, today: date = Depends(get_today)):
    """
    Active cycle of a card with current spend, for the dashboard widget.

    Spend only counts expenses in the requested currency (default from settings).
    """
    config = request_body.card.to_domain()
    currency = request_body.currency or settings.default_currency
    status = get_card_status(
        config,
        [t.to_domain() for t in request_body.transactions],
        currency,
        request_body.today or today,
    )

    return CardStatusResponse(
        instrument=config.instrument,
        currency=currency,
        cycle_start=status.cycle_start,
        closing_date=status.closing_date,
        due_date=status.due_date,
        current_spend_cents=status.current_spend_cents,
        days_to_close=status.days_to_close,
    )
