"""
Loan Amortization Module

Fixed monthly payment calculation and month-by-month amortization schedule
generation for equal-installment loans. Both operations are pure functions of
their inputs with no I/O or shared state.

Numeric policy:
    - rate divisions (percent -> fraction, annual -> monthly) keep RATE_SCALE
      fractional digits, rounded half-up
    - (1 + r) ** n is evaluated to POWER_PRECISION significant digits
    - products and differences are exact
    - only final money values are rounded half-up to cents
"""

from decimal import Decimal
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .money import (
    CURRENCY_SCALE, Number, divide, format_amount, multiply, power,
    subtract, to_cents, to_decimal,
)

RATE_SCALE = 10
POWER_PRECISION = 20

MONTHS_PER_YEAR = Decimal('12')
PERCENT = Decimal('100')
ZERO = Decimal('0')
ONE = Decimal('1')


@dataclass(frozen=True)
class PaymentResult:
    """Fixed monthly payment for a set of loan terms"""
    monthly_payment: Decimal


@dataclass(frozen=True)
class ScheduleEntry:
    """Single month of an amortization schedule"""
    month: int
    payment: Decimal
    principal_portion: Decimal
    interest_portion: Decimal
    remaining_balance: Decimal

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation used in API responses"""
        return {
            "month": self.month,
            "payment": format_amount(self.payment),
            "principal": format_amount(self.principal_portion),
            "interest": format_amount(self.interest_portion),
            "remainingBalance": format_amount(self.remaining_balance),
        }


@dataclass(frozen=True)
class LoanTerms:
    """
    Snapshot of the inputs to the payment calculation.

    Any field may be missing; missing data yields a zero payment.
    """
    principal: Optional[Decimal] = None
    annual_rate_percent: Optional[Decimal] = None
    term_months: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, 'principal', to_decimal(self.principal))
        object.__setattr__(self, 'annual_rate_percent', to_decimal(self.annual_rate_percent))

    @property
    def is_complete(self) -> bool:
        """Check if every input needed for a payment is present"""
        return (
            self.principal is not None
            and self.annual_rate_percent is not None
            and self.term_months is not None
        )

    def calculate_payment(self) -> PaymentResult:
        """Calculate the fixed monthly payment for these terms"""
        return PaymentResult(
            monthly_payment=calculate_monthly_payment(
                self.principal, self.annual_rate_percent, self.term_months
            )
        )

    def generate_schedule(self, monthly_payment: Optional[Decimal] = None) -> List[ScheduleEntry]:
        """
        Generate the amortization schedule for these terms

        Args:
            monthly_payment: Payment to amortize with; calculated from the
                terms when omitted

        Returns:
            List of ScheduleEntry, one per month
        """
        if monthly_payment is None:
            monthly_payment = self.calculate_payment().monthly_payment
        return generate_schedule(
            self.principal, self.annual_rate_percent, self.term_months, monthly_payment
        )


def calculate_annual_rate(annual_rate_percent: Number) -> Decimal:
    """Convert a percentage rate (6.0 means 6%) to a decimal fraction"""
    return divide(to_decimal(annual_rate_percent), PERCENT, RATE_SCALE)


def calculate_monthly_rate(annual_rate_percent: Number) -> Decimal:
    """Convert a percentage annual rate to the monthly decimal rate"""
    return divide(calculate_annual_rate(annual_rate_percent), MONTHS_PER_YEAR, RATE_SCALE)


def calculate_monthly_payment(
    principal: Optional[Number],
    annual_rate_percent: Optional[Number],
    term_months: Optional[int]
) -> Decimal:
    """
    Calculate the fixed monthly payment using the standard amortization formula:

        payment = P * r * (1 + r)^n / ((1 + r)^n - 1)

    where P = principal, r = monthly interest rate, n = term in months.
    A zero rate gives straight-line repayment, P / n.

    Args:
        principal: Loan amount
        annual_rate_percent: Nominal annual rate as a percentage
        term_months: Number of monthly payments (must be >= 1)

    Returns:
        Monthly payment rounded half-up to cents; 0.00 if any input is missing
    """
    if principal is None or annual_rate_percent is None or term_months is None:
        return to_cents(ZERO)

    principal = to_decimal(principal)
    n = int(term_months)

    annual_rate = calculate_annual_rate(annual_rate_percent)
    monthly_rate = divide(annual_rate, MONTHS_PER_YEAR, RATE_SCALE)

    # A positive rate below RATE_SCALE resolution amortizes like a zero rate
    if annual_rate == ZERO or monthly_rate == ZERO:
        return divide(principal, Decimal(n), CURRENCY_SCALE)

    growth = power(ONE + monthly_rate, n, POWER_PRECISION)

    numerator = multiply(principal, monthly_rate, growth)
    denominator = subtract(growth, ONE)

    return divide(numerator, denominator, CURRENCY_SCALE)


def generate_schedule(
    principal: Number,
    annual_rate_percent: Number,
    term_months: int,
    monthly_payment: Number
) -> List[ScheduleEntry]:
    """
    Generate a month-by-month amortization schedule

    Each month's interest is charged on the outstanding balance and the rest
    of the payment retires principal. The final month pays off whatever
    balance remains, so the last entry always closes at exactly zero; its
    payment absorbs any rounding drift from earlier months.

    The caller supplies an already calculated monthly payment (see
    calculate_monthly_payment). Degenerate payments are not rejected.

    Args:
        principal: Loan amount
        annual_rate_percent: Nominal annual rate as a percentage
        term_months: Number of monthly payments
        monthly_payment: Scheduled monthly payment

    Returns:
        List of exactly term_months ScheduleEntry objects
    """
    balance = to_decimal(principal)
    current_payment = to_decimal(monthly_payment)
    monthly_rate = calculate_monthly_rate(annual_rate_percent)
    n = int(term_months)

    schedule = []
    for month in range(1, n + 1):
        interest_portion = to_cents(multiply(balance, monthly_rate))
        principal_portion = subtract(current_payment, interest_portion)

        if month == n:
            principal_portion = balance
            current_payment = principal_portion + interest_portion

        balance = subtract(balance, principal_portion)
        if balance < ZERO:
            balance = ZERO

        schedule.append(ScheduleEntry(
            month=month,
            payment=to_cents(current_payment),
            principal_portion=to_cents(principal_portion),
            interest_portion=interest_portion,
            remaining_balance=to_cents(balance),
        ))

    return schedule
