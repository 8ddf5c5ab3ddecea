"""
Archive API endpoints.

Congregations see their own archives; administrators see all.
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from church_ledger.api.dependencies import get_caller
from church_ledger.errors import LedgerError
from church_ledger.models.base import get_db
from church_ledger.reports.statement import render_archive_statement
from church_ledger.schemas.archive import ArchiveDetailResponse, ArchiveResponse
from church_ledger.schemas.branch import Caller
from church_ledger.services.report_service import ReportService

router = APIRouter(prefix="/archives", tags=["Archives"])


@router.get("", response_model=list[ArchiveResponse])
def list_archives(
    month: str | None = None,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """List archives, newest period first. `month` is YYYY-MM."""
    try:
        return ReportService(db).list_archives(caller, month)
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/{archive_id}", response_model=ArchiveDetailResponse)
def get_archive(
    archive_id: int,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Archive header with its per-fund balances."""
    try:
        return ReportService(db).get_archive_detail(archive_id, caller)
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/{archive_id}/statement", response_class=HTMLResponse)
def get_archive_statement(
    archive_id: int,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Printable monthly statement for one archive."""
    try:
        archive = ReportService(db).get_archive_detail(archive_id, caller)
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    filename = f"statement-{archive.month_year}-{archive.branch_id}.html"
    return HTMLResponse(
        render_archive_statement(archive),
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )
