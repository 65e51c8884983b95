"""
Loan Account Module

Manages loan account records: creation, full and partial updates, lookup,
deletion and amortization schedule retrieval. The monthly payment of every
saved account is recomputed from its terms by the amortization calculator.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional
import uuid

from .amortization import LoanTerms, ScheduleEntry
from .money import Number, to_decimal
from .storage import StorageInterface, StorageRecord
from .logging_config import get_logger, log_action


ENTITY_NAME = "loanAccount"

# Fields a partial update may change
UPDATABLE_FIELDS = (
    'account_name', 'loan_amount', 'interest_rate', 'term_months',
    'monthly_payment', 'remaining_balance', 'owner_login',
)


@dataclass(eq=False)
class LoanAccount(StorageRecord):
    """Loan account record with its terms and derived payment state"""
    account_name: str
    loan_amount: Decimal
    interest_rate: Decimal              # Annual percentage, e.g. 6.0 for 6%
    term_months: int
    monthly_payment: Optional[Decimal] = None
    remaining_balance: Optional[Decimal] = None
    owner_login: Optional[str] = None   # Login of the owning user

    def __post_init__(self):
        self.loan_amount = to_decimal(self.loan_amount)
        self.interest_rate = to_decimal(self.interest_rate)
        self.monthly_payment = to_decimal(self.monthly_payment)
        self.remaining_balance = to_decimal(self.remaining_balance)

    @property
    def terms(self) -> LoanTerms:
        """Snapshot of the inputs to the payment calculation"""
        return LoanTerms(
            principal=self.loan_amount,
            annual_rate_percent=self.interest_rate,
            term_months=self.term_months
        )

    def __eq__(self, other) -> bool:
        # Records are equal only by persisted identity
        if self is other:
            return True
        if not isinstance(other, LoanAccount):
            return False
        return bool(self.id) and self.id == other.id

    def __hash__(self) -> int:
        return hash(LoanAccount)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LoanAccount':
        """Create instance from stored dictionary"""
        data = dict(data)
        for field_name in ('loan_amount', 'interest_rate', 'monthly_payment', 'remaining_balance'):
            if data.get(field_name) is not None:
                data[field_name] = Decimal(data[field_name])
        return super().from_dict(data)


def apply_payment_terms(account: LoanAccount) -> LoanAccount:
    """
    Return a copy of account with its monthly payment recomputed

    The remaining balance starts at the loan amount when it has not been
    set yet; an existing balance is preserved.
    """
    remaining_balance = account.remaining_balance
    if remaining_balance is None:
        remaining_balance = account.loan_amount
    return replace(
        account,
        monthly_payment=account.terms.calculate_payment().monthly_payment,
        remaining_balance=remaining_balance
    )


def validate_account_fields(
    account_name: Optional[str],
    loan_amount: Optional[Decimal],
    interest_rate: Optional[Decimal],
    term_months: Optional[int]
) -> None:
    """
    Validate the required fields of a loan account

    Raises:
        ValueError: If a field is missing or out of range
    """
    if not account_name or not account_name.strip():
        raise ValueError("Account name is required")
    if loan_amount is None or loan_amount < Decimal('0'):
        raise ValueError("Loan amount must be zero or greater")
    if interest_rate is None or interest_rate < Decimal('0'):
        raise ValueError("Interest rate must be zero or greater")
    if term_months is None or isinstance(term_months, bool) or int(term_months) != term_months:
        raise ValueError("Term must be a whole number of months")
    if term_months < 1:
        raise ValueError("Term must be at least 1 month")


class LoanAccountManager:
    """
    Manages loan account records on top of a storage backend
    """

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.accounts_table = "loan_accounts"
        self.logger = get_logger("loan_accounts.accounts")

    def create_account(
        self,
        account_name: str,
        loan_amount: Number,
        interest_rate: Number,
        term_months: int,
        remaining_balance: Optional[Number] = None,
        owner_login: Optional[str] = None
    ) -> LoanAccount:
        """
        Create a new loan account

        Args:
            account_name: Display name of the account
            loan_amount: Principal amount
            interest_rate: Annual interest rate as a percentage
            term_months: Loan term in months
            remaining_balance: Outstanding balance (defaults to loan_amount)
            owner_login: Login of the owning user

        Returns:
            Created LoanAccount with its monthly payment set
        """
        loan_amount = to_decimal(loan_amount)
        interest_rate = to_decimal(interest_rate)
        validate_account_fields(account_name, loan_amount, interest_rate, term_months)

        now = datetime.now(timezone.utc)
        account = apply_payment_terms(LoanAccount(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            account_name=account_name,
            loan_amount=loan_amount,
            interest_rate=interest_rate,
            term_months=int(term_months),
            remaining_balance=to_decimal(remaining_balance),
            owner_login=owner_login
        ))

        self._save_account(account)

        log_action(
            self.logger, "info", f"Loan account created: {account.account_name}",
            user_id=owner_login, action="create_loan_account",
            resource=f"{ENTITY_NAME}:{account.id}",
            extra=self._terms_summary(account)
        )

        return account

    def update_account(
        self,
        account_id: str,
        account_name: str,
        loan_amount: Number,
        interest_rate: Number,
        term_months: int,
        remaining_balance: Optional[Number] = None,
        owner_login: Optional[str] = None
    ) -> LoanAccount:
        """
        Replace every editable field of an existing loan account

        Returns:
            Updated LoanAccount with its monthly payment recomputed

        Raises:
            ValueError: If the account does not exist or a field is invalid
        """
        existing = self.get_account(account_id)
        if not existing:
            raise ValueError(f"Loan account {account_id} not found")

        loan_amount = to_decimal(loan_amount)
        interest_rate = to_decimal(interest_rate)
        validate_account_fields(account_name, loan_amount, interest_rate, term_months)

        account = apply_payment_terms(replace(
            existing,
            updated_at=datetime.now(timezone.utc),
            account_name=account_name,
            loan_amount=loan_amount,
            interest_rate=interest_rate,
            term_months=int(term_months),
            monthly_payment=None,
            remaining_balance=to_decimal(remaining_balance),
            owner_login=owner_login
        ))

        self._save_account(account)

        log_action(
            self.logger, "info", f"Loan account updated: {account.account_name}",
            user_id=owner_login, action="update_loan_account",
            resource=f"{ENTITY_NAME}:{account.id}",
            extra=self._terms_summary(account)
        )

        return account

    def partial_update_account(self, account_id: str, changes: Dict[str, Any]) -> Optional[LoanAccount]:
        """
        Merge the non-None values in changes into an existing loan account

        A supplied monthly payment is always replaced by the calculated one.

        Args:
            account_id: Loan account ID
            changes: Field name to new value

        Returns:
            Updated LoanAccount, or None if the account does not exist

        Raises:
            ValueError: If a field is unknown or the merged account is invalid
        """
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        existing = self.get_account(account_id)
        if not existing:
            return None

        present = {name: value for name, value in changes.items() if value is not None}
        merged = replace(existing, updated_at=datetime.now(timezone.utc), **present)
        validate_account_fields(
            merged.account_name, merged.loan_amount, merged.interest_rate, merged.term_months
        )
        account = apply_payment_terms(merged)

        self._save_account(account)

        log_action(
            self.logger, "info", f"Loan account partially updated: {account.account_name}",
            user_id=account.owner_login, action="partial_update_loan_account",
            resource=f"{ENTITY_NAME}:{account.id}",
            extra={"fields": sorted(present), **self._terms_summary(account)}
        )

        return account

    def get_account(self, account_id: str) -> Optional[LoanAccount]:
        """Get loan account by ID"""
        data = self.storage.load(self.accounts_table, account_id)
        if data:
            return LoanAccount.from_dict(data)
        return None

    def account_exists(self, account_id: str) -> bool:
        """Check if a loan account exists"""
        return self.storage.exists(self.accounts_table, account_id)

    def list_accounts(self, owner_login: Optional[str] = None) -> List[LoanAccount]:
        """
        List loan accounts in creation order

        Args:
            owner_login: Only return accounts owned by this login

        Returns:
            List of LoanAccount objects
        """
        if owner_login is None:
            records = self.storage.load_all(self.accounts_table)
        else:
            records = self.storage.find(self.accounts_table, {"owner_login": owner_login})
        return [LoanAccount.from_dict(data) for data in records]

    def delete_account(self, account_id: str) -> bool:
        """Delete a loan account; returns False if it did not exist"""
        deleted = self.storage.delete(self.accounts_table, account_id)
        if deleted:
            log_action(
                self.logger, "info", "Loan account deleted",
                action="delete_loan_account", resource=f"{ENTITY_NAME}:{account_id}"
            )
        return deleted

    def get_amortization_schedule(self, account_id: str) -> Optional[List[ScheduleEntry]]:
        """
        Compute the amortization schedule of a loan account

        Returns:
            List of ScheduleEntry objects, or None if the account does not exist
        """
        account = self.get_account(account_id)
        if not account:
            return None

        if account.monthly_payment is None:
            account = apply_payment_terms(account)

        self.logger.debug(f"Generating {account.term_months}-month schedule for {ENTITY_NAME}:{account_id}")
        return account.terms.generate_schedule(account.monthly_payment)

    def _save_account(self, account: LoanAccount) -> None:
        """Save loan account to storage"""
        self.storage.save(self.accounts_table, account.id, account.to_dict())

    @staticmethod
    def _terms_summary(account: LoanAccount) -> Dict[str, Any]:
        return {
            "loan_amount": str(account.loan_amount),
            "interest_rate": str(account.interest_rate),
            "term_months": account.term_months,
            "monthly_payment": str(account.monthly_payment),
        }
