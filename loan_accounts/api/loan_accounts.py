"""
Loan account endpoints
"""

from typing import Dict, Optional
from urllib.parse import quote
from fastapi import APIRouter, HTTPException, Depends, Query, Response, status

from .dependencies import LoanAccountSystem, get_loan_account_system
from .schemas import (
    LoanAccountModel,
    LoanAccountPatchRequest,
    LoanAccountRequest,
    schedule_to_response,
)
from ..accounts import ENTITY_NAME
from ..logging_config import get_logger


router = APIRouter()
logger = get_logger("loan_accounts.api")


def alert_headers(application_name: str, event: str, entity_id: str) -> Dict[str, str]:
    """Headers announcing a created/updated/deleted loan account"""
    return {
        f"X-{application_name}-alert": f"{application_name}.{ENTITY_NAME}.{event}",
        f"X-{application_name}-params": quote(entity_id),
    }


def bad_request(system: LoanAccountSystem, message: str, error_key: str) -> HTTPException:
    """400 response carrying the error key in the failure alert headers"""
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": message, "entityName": ENTITY_NAME, "errorKey": error_key},
        headers={
            f"X-{system.application_name}-error": f"error.{error_key}",
            f"X-{system.application_name}-params": ENTITY_NAME,
        }
    )


def check_path_id(system: LoanAccountSystem, account_id: str, body_id: Optional[str]) -> None:
    """Validate that the body id is present, matches the path and exists"""
    if body_id is None:
        raise bad_request(system, "Invalid id", "idnull")
    if body_id != account_id:
        raise bad_request(system, "Invalid ID", "idinvalid")
    if not system.account_manager.account_exists(account_id):
        raise bad_request(system, "Entity not found", "idnotfound")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_loan_account(
    request: LoanAccountRequest,
    response: Response,
    system: LoanAccountSystem = Depends(get_loan_account_system)
):
    """Create a new loan account"""
    logger.debug(f"REST request to save LoanAccount : {request.account_name}")
    if request.id is not None:
        raise bad_request(system, "A new loanAccount cannot already have an ID", "idexists")

    try:
        account = system.account_manager.create_account(
            account_name=request.account_name,
            loan_amount=request.loan_amount,
            interest_rate=request.interest_rate,
            term_months=request.term_months,
            remaining_balance=request.remaining_balance,
            owner_login=request.owner_login
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    response.headers["Location"] = f"/api/loan-accounts/{account.id}"
    response.headers.update(alert_headers(system.application_name, "created", account.id))
    return LoanAccountModel.from_account(account).to_response()


@router.put("/{account_id}")
async def update_loan_account(
    account_id: str,
    request: LoanAccountRequest,
    response: Response,
    system: LoanAccountSystem = Depends(get_loan_account_system)
):
    """Update an existing loan account"""
    logger.debug(f"REST request to update LoanAccount : {account_id}")
    check_path_id(system, account_id, request.id)

    try:
        account = system.account_manager.update_account(
            account_id=account_id,
            account_name=request.account_name,
            loan_amount=request.loan_amount,
            interest_rate=request.interest_rate,
            term_months=request.term_months,
            remaining_balance=request.remaining_balance,
            owner_login=request.owner_login
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    response.headers.update(alert_headers(system.application_name, "updated", account.id))
    return LoanAccountModel.from_account(account).to_response()


@router.patch("/{account_id}")
async def partial_update_loan_account(
    account_id: str,
    request: LoanAccountPatchRequest,
    response: Response,
    system: LoanAccountSystem = Depends(get_loan_account_system)
):
    """Partially update a loan account; null fields are ignored"""
    logger.debug(f"REST request to partial update LoanAccount partially : {account_id}")
    check_path_id(system, account_id, request.id)

    try:
        account = system.account_manager.partial_update_account(account_id, request.changes())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not account:
        raise HTTPException(status_code=404, detail="Loan account not found")

    response.headers.update(alert_headers(system.application_name, "updated", account.id))
    return LoanAccountModel.from_account(account).to_response()


@router.get("")
async def list_loan_accounts(
    owner: Optional[str] = Query(None, description="Only accounts owned by this login"),
    system: LoanAccountSystem = Depends(get_loan_account_system)
):
    """List loan accounts"""
    logger.debug("REST request to get all LoanAccounts")
    accounts = system.account_manager.list_accounts(owner_login=owner)
    return [LoanAccountModel.from_account(account).to_response() for account in accounts]


@router.get("/{account_id}")
async def get_loan_account(
    account_id: str,
    system: LoanAccountSystem = Depends(get_loan_account_system)
):
    """Get loan account by ID"""
    logger.debug(f"REST request to get LoanAccount : {account_id}")
    account = system.account_manager.get_account(account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Loan account not found")
    return LoanAccountModel.from_account(account).to_response()


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_loan_account(
    account_id: str,
    system: LoanAccountSystem = Depends(get_loan_account_system)
):
    """Delete a loan account"""
    logger.debug(f"REST request to delete LoanAccount : {account_id}")
    system.account_manager.delete_account(account_id)
    return Response(
        status_code=status.HTTP_204_NO_CONTENT,
        headers=alert_headers(system.application_name, "deleted", account_id)
    )


@router.get("/{account_id}/amortization")
async def get_amortization_schedule(
    account_id: str,
    system: LoanAccountSystem = Depends(get_loan_account_system)
):
    """Get the month-by-month amortization schedule of a loan account"""
    logger.debug(f"REST request to get amortization schedule for LoanAccount : {account_id}")
    schedule = system.account_manager.get_amortization_schedule(account_id)
    if schedule is None:
        raise HTTPException(status_code=404, detail="Loan account not found")
    return schedule_to_response(schedule)
