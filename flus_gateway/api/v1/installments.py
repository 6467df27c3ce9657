"""POST /v1/installments/plan - split a purchase into monthly installments"""

from fastapi import APIRouter

from flus_gateway.api.v1.schemas import InstallmentPlanRequest, InstallmentPlanResponse, InstallmentSchema
from flus_gateway.domain.installments import generate_installment_plan

router = APIRouter()


@router.post("/installments/plan", response_model=InstallmentPlanResponse)
def create_installment_plan(request_body: InstallmentPlanRequest):
    """
    Build the installment schedule for a purchase.

    Returns:
        One installment per month, amounts summing to the total with interest
    """
    plan = generate_installment_plan(
        request_body.amount_cents,
        num_installments=request_body.installments,
        start_date=request_body.start_date,
        interest_rate=request_body.interest_rate,
    )

    return InstallmentPlanResponse(
        total_cents=sum(inst.amount_cents for inst in plan),
        installments=[InstallmentSchema.model_validate(inst, from_attributes=True) for inst in plan],
    )
