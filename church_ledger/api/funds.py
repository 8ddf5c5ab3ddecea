"""
Fund and balance API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from church_ledger.api.dependencies import get_caller
from church_ledger.errors import LedgerError
from church_ledger.models.base import get_db
from church_ledger.schemas.branch import BranchBalanceResponse, Caller
from church_ledger.schemas.entry import EntryResponse
from church_ledger.schemas.fund import (
    FundBalanceResponse,
    FundCreate,
    FundResponse,
)
from church_ledger.services.fund_service import FundService
from church_ledger.services.report_service import ReportService

router = APIRouter(tags=["Funds"])


@router.get("/funds", response_model=list[FundResponse])
def list_funds(
    branch_id: int | None = None,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """List funds, general cash first. Admins may filter by branch_id."""
    try:
        return FundService(db).list_funds(caller, branch_id)
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/funds", response_model=FundResponse, status_code=201)
def create_fund(
    request: FundCreate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Create a named fund with a zero balance."""
    service = FundService(db)
    try:
        fund = service.create_fund(caller, request)
        db.commit()
        return fund
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/funds/{fund_id}/balance", response_model=FundBalanceResponse)
def get_fund_balance(
    fund_id: int,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Current cached balance of a fund."""
    try:
        return ReportService(db).get_fund_balance(fund_id, caller)
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/funds/{fund_id}/entries", response_model=list[EntryResponse])
def search_fund_entries(
    fund_id: int,
    person: str = "",
    include_system: bool = False,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Entries of a fund filtered by person name."""
    try:
        return ReportService(db).search_fund_entries(
            fund_id, person, include_system=include_system, caller=caller
        )
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/balance", response_model=BranchBalanceResponse)
def get_branch_balance(
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Total of the caller branch's fund balances."""
    if caller.is_admin:
        raise HTTPException(
            status_code=403, detail="Only congregations hold a balance"
        )
    balance = ReportService(db).get_branch_balance(caller.branch_id)
    return BranchBalanceResponse(branch_id=caller.branch_id, balance=balance)
