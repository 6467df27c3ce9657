"""Installment plan generation for card purchases paid in monthly quotas"""

from datetime import date
from typing import List
from flus_gateway.domain.models import Installment
from flus_gateway.utils.date_utils import add_months_clamped


def generate_installment_plan(
    amount_cents: int,
    num_installments: int = 1,
    start_date: date | None = None,
    interest_rate: float = 0.0,
) -> List[Installment]:
    """
    Split a purchase into equal monthly installments.

    Requirements:
    - Optional flat interest (percent) applied to the total before splitting
    - One installment per month starting at start_date, month-end safe
      (Jan 31 -> Feb 28 -> Mar 31, every date derived from start_date)
    - Last installment absorbs rounding remainder (≤ num_installments-1 cents drift)

    Args:
        amount_cents: Purchase amount before interest
        num_installments: Number of monthly quotas (default 1)
        start_date: First due date (default: today)
        interest_rate: Flat interest in percent, e.g. 10.0 for +10%

    Returns:
        List of Installment objects with due dates and amounts

    Example:
        $100.00 in 3 → [$33.33, $33.33, $33.34]
    """
    if amount_cents <= 0 or num_installments <= 0:
        return []

    if start_date is None:
        start_date = date.today()

    total_cents = amount_cents
    if interest_rate > 0:
        total_cents = round(amount_cents * (1 + interest_rate / 100))

    base_amount = total_cents // num_installments
    remainder = total_cents % num_installments

    installments = []
    for i in range(num_installments):
        amount = base_amount + (remainder if i == num_installments - 1 else 0)
        installments.append(
            Installment(
                number=i + 1,
                total=num_installments,
                due_date=add_months_clamped(start_date, i),
                amount_cents=amount,
            )
        )

    return installments
