"""
Stateless loan calculator endpoints
"""

from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Query

from .schemas import PaymentQuoteModel, schedule_to_response
from ..amortization import LoanTerms
from ..money import format_amount


router = APIRouter()


@router.get("/payment")
async def quote_monthly_payment(
    loan_amount: Optional[Decimal] = Query(None, alias="loanAmount", ge=0),
    interest_rate: Optional[Decimal] = Query(None, alias="interestRate", ge=0),
    term_months: Optional[int] = Query(None, alias="termMonths", ge=1)
):
    """Quote the monthly payment for loan terms; missing terms quote 0.00"""
    terms = LoanTerms(loan_amount, interest_rate, term_months)
    result = terms.calculate_payment()
    return PaymentQuoteModel(
        loan_amount=str(loan_amount) if loan_amount is not None else None,
        interest_rate=str(interest_rate) if interest_rate is not None else None,
        term_months=term_months,
        monthly_payment=format_amount(result.monthly_payment)
    ).model_dump(by_alias=True)


@router.get("/schedule")
async def quote_schedule(
    loan_amount: Decimal = Query(..., alias="loanAmount", ge=0),
    interest_rate: Decimal = Query(..., alias="interestRate", ge=0),
    term_months: int = Query(..., alias="termMonths", ge=1, le=1200)
):
    """Amortization schedule for loan terms that are not stored"""
    terms = LoanTerms(loan_amount, interest_rate, term_months)
    return schedule_to_response(terms.generate_schedule())
