"""
Pydantic schemas for monthly archives and resets.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from church_ledger.models.enums import FundKind


class FundArchiveResponse(BaseModel):
    fund_id: int
    fund_name: str
    initial_balance: Decimal
    final_balance: Decimal

    model_config = {"from_attributes": True}


class ArchiveResponse(BaseModel):
    id: int
    branch_id: int
    branch_name: str
    month_year: str
    total_tithes: Decimal
    total_offerings: Decimal
    final_balance: Decimal
    archived_at: datetime

    model_config = {"from_attributes": True}


class ArchiveDetailResponse(ArchiveResponse):
    fund_archives: list[FundArchiveResponse]


class ArchiveRunResponse(BaseModel):
    """Outcome of one monthly archive run."""
    success: bool = True
    month_year: str
    archive_ids: list[int]


class ResetResponse(BaseModel):
    """
    Outcome of zeroing a branch's funds.

    balances_by_kind sums the branch's fund balances per fund
    kind after the reset.
    """
    branch_id: int
    entries_created: int
    balances_by_kind: dict[FundKind, Decimal]
