"""
Pydantic schemas for API requests and responses
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from ..accounts import LoanAccount
from ..amortization import ScheduleEntry
from ..money import format_amount


class LoanAccountRequest(BaseModel):
    """Body of create and full update requests"""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    account_name: str = Field(..., alias="accountName", min_length=1)
    loan_amount: Decimal = Field(..., alias="loanAmount", ge=0, description="Principal amount")
    interest_rate: Decimal = Field(..., alias="interestRate", ge=0, description="Annual rate in percent, 6.0 = 6%")
    term_months: int = Field(..., alias="termMonths", ge=1)
    monthly_payment: Optional[Decimal] = Field(None, alias="monthlyPayment", description="Ignored, always recalculated")
    remaining_balance: Optional[Decimal] = Field(None, alias="remainingBalance", ge=0)
    owner_login: Optional[str] = Field(None, alias="ownerLogin")


class LoanAccountPatchRequest(BaseModel):
    """Body of partial update requests; null fields are left unchanged"""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    account_name: Optional[str] = Field(None, alias="accountName", min_length=1)
    loan_amount: Optional[Decimal] = Field(None, alias="loanAmount", ge=0)
    interest_rate: Optional[Decimal] = Field(None, alias="interestRate", ge=0)
    term_months: Optional[int] = Field(None, alias="termMonths", ge=1)
    monthly_payment: Optional[Decimal] = Field(None, alias="monthlyPayment")
    remaining_balance: Optional[Decimal] = Field(None, alias="remainingBalance", ge=0)
    owner_login: Optional[str] = Field(None, alias="ownerLogin")

    def changes(self) -> Dict[str, Any]:
        """Non-null fields other than the id"""
        return self.model_dump(exclude={"id"}, exclude_none=True)


class LoanAccountModel(BaseModel):
    """Loan account as returned by the API; amounts are decimal strings"""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    account_name: str = Field(..., alias="accountName")
    loan_amount: str = Field(..., alias="loanAmount")
    interest_rate: str = Field(..., alias="interestRate")
    term_months: int = Field(..., alias="termMonths")
    monthly_payment: Optional[str] = Field(None, alias="monthlyPayment")
    remaining_balance: Optional[str] = Field(None, alias="remainingBalance")
    owner_login: Optional[str] = Field(None, alias="ownerLogin")
    created_at: str = Field(..., alias="createdAt")
    updated_at: str = Field(..., alias="updatedAt")

    @classmethod
    def from_account(cls, account: LoanAccount) -> 'LoanAccountModel':
        return cls(
            id=account.id,
            account_name=account.account_name,
            loan_amount=format_amount(account.loan_amount),
            interest_rate=str(account.interest_rate),
            term_months=account.term_months,
            monthly_payment=format_amount(account.monthly_payment) if account.monthly_payment is not None else None,
            remaining_balance=format_amount(account.remaining_balance) if account.remaining_balance is not None else None,
            owner_login=account.owner_login,
            created_at=account.created_at.isoformat(),
            updated_at=account.updated_at.isoformat()
        )

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class PaymentQuoteModel(BaseModel):
    """Monthly payment quote for ad-hoc loan terms"""
    model_config = ConfigDict(populate_by_name=True)

    loan_amount: Optional[str] = Field(None, alias="loanAmount")
    interest_rate: Optional[str] = Field(None, alias="interestRate")
    term_months: Optional[int] = Field(None, alias="termMonths")
    monthly_payment: str = Field(..., alias="monthlyPayment", examples=["1199.10"])


def schedule_to_response(schedule: List[ScheduleEntry]) -> List[Dict[str, Any]]:
    """Serialize a schedule as a list of month/payment/principal/interest/remainingBalance maps"""
    return [entry.to_dict() for entry in schedule]
