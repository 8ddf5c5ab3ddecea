"""
Administrator API endpoints.

Branch provisioning, resets, the monthly archive, and fleet-wide
reports. Every route requires an administrator.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from church_ledger.api.dependencies import require_admin
from church_ledger.errors import LedgerError
from church_ledger.models.base import get_db
from church_ledger.reports.statement import render_branch_month_report
from church_ledger.schemas.archive import ArchiveRunResponse, ResetResponse
from church_ledger.schemas.branch import (
    BranchCreate,
    BranchRename,
    BranchResponse,
    Caller,
    PasswordChange,
)
from church_ledger.schemas.report import AdminOverview, BranchReconciliation
from church_ledger.services.archive_service import ArchiveService
from church_ledger.services.branch_service import BranchService
from church_ledger.services.reconciliation_service import ReconciliationService
from church_ledger.services.report_service import ReportService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


# --- Branch Endpoints ---

@router.post("/branches", response_model=BranchResponse, status_code=201)
def create_branch(
    request: BranchCreate,
    caller: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Provision a branch and its general-cash fund."""
    service = BranchService(db)
    try:
        branch = service.create_branch(request)
        db.commit()
        return branch
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/branches", response_model=list[BranchResponse])
def list_branches(
    caller: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return BranchService(db).list_branches()


@router.patch("/branches/{branch_id}", response_model=BranchResponse)
def rename_branch(
    branch_id: int,
    request: BranchRename,
    caller: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    service = BranchService(db)
    try:
        branch = service.rename_branch(branch_id, request.name)
        db.commit()
        return branch
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.put("/branches/{branch_id}/password")
def change_branch_password(
    branch_id: int,
    request: PasswordChange,
    caller: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    service = BranchService(db)
    try:
        service.change_password(branch_id, request)
        db.commit()
        return {"success": True}
    except LedgerError as e:
        db.rollback()
        # A wrong current password is a failed credential check
        status_code = 401 if e.status_code == 403 else e.status_code
        raise HTTPException(status_code=status_code, detail=str(e))


@router.post("/branches/{branch_id}/reset", response_model=ResetResponse)
def reset_branch_funds(
    branch_id: int,
    caller: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Zero every fund of a branch without archiving.

    Used for manual corrections outside the monthly cycle.
    """
    service = ArchiveService(db)
    try:
        result = service.reset_funds_for_branch(branch_id)
        db.commit()
        return result
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Reset of branch %s failed", branch_id)
        raise HTTPException(status_code=500, detail="Reset failed; no changes were kept")


@router.get(
    "/branches/{branch_id}/reconciliation",
    response_model=BranchReconciliation,
)
def reconcile_branch(
    branch_id: int,
    caller: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Compare cached fund balances with entry history."""
    try:
        return ReconciliationService(db).reconcile_branch(branch_id)
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


# --- Archive and Report Endpoints ---

@router.post("/monthly-archive", response_model=ArchiveRunResponse)
def run_monthly_archive(
    caller: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Archive and reset every congregation for the previous month.

    All branches are processed in one transaction. On any failure
    nothing is kept and the run can be retried.
    """
    service = ArchiveService(db)
    try:
        result = service.run_monthly_archive()
        db.commit()
        return result
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Monthly archive failed and was rolled back")
        raise HTTPException(
            status_code=500,
            detail="Monthly archive failed; no changes were kept",
        )


@router.get("/overview", response_model=AdminOverview)
def admin_overview(
    caller: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Per-branch totals and this month's tithes and offerings."""
    return ReportService(db).admin_overview()


@router.get("/reports/branches", response_class=HTMLResponse)
def branch_month_report(
    month: str,
    caller: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Printable report of every branch's archived balance for a period."""
    try:
        report = ReportService(db).branch_month_report(month)
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    filename = f"branch-balances-{month}.html"
    return HTMLResponse(
        render_branch_month_report(report),
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )
