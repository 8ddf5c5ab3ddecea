"""
Entry API endpoints.

The API layer is thin: it handles HTTP concerns and the commit,
and delegates every balance rule to LedgerService.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from church_ledger.api.dependencies import get_caller
from church_ledger.errors import LedgerError
from church_ledger.models.base import get_db
from church_ledger.schemas.branch import Caller
from church_ledger.schemas.entry import (
    EntryCreate,
    EntryUpdate,
    EntryResponse,
    EntryPage,
    PostEntryResponse,
    UpdateEntryResponse,
)
from church_ledger.services.ledger_service import LedgerService
from church_ledger.services.report_service import ReportService

router = APIRouter(prefix="/entries", tags=["Entries"])


@router.post("", response_model=PostEntryResponse, status_code=201)
def post_entry(
    request: EntryCreate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """
    Post an entry and move the target fund's balance.

    Tithes and offerings always go to the general-cash fund.
    Deposits and withdrawals need a fund_id.
    """
    service = LedgerService(db)
    try:
        entry = service.post_entry(caller, request)
        db.commit()
        return PostEntryResponse(
            entry=EntryResponse.model_validate(entry),
            new_balance=entry.new_balance,
        )
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("", response_model=EntryPage)
def list_entries(
    branch_id: int | None = None,
    fund_id: int | None = None,
    page: int = 1,
    page_size: int | None = None,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """
    List entries, newest first.

    Administrators may omit branch_id to list every branch.
    """
    service = ReportService(db)
    try:
        return service.list_entries(
            caller,
            branch_id=branch_id,
            fund_id=fund_id,
            page=page,
            page_size=page_size,
        )
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/{entry_id}", response_model=EntryResponse)
def get_entry(
    entry_id: int,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Get entry details."""
    service = ReportService(db)
    try:
        return service.get_entry(entry_id, caller)
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.put("/{entry_id}", response_model=UpdateEntryResponse)
def update_entry(
    entry_id: int,
    request: EntryUpdate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """
    Correct an entry.

    The fund balance moves by the difference between the new and
    old amount; earlier balance snapshots are left as they were.
    """
    service = LedgerService(db)
    try:
        entry = service.update_entry(caller, entry_id, request)
        db.commit()
        return UpdateEntryResponse(
            success=True, entry=EntryResponse.model_validate(entry)
        )
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
