"""
Pydantic schemas for funds.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from church_ledger.models.enums import FundKind


class FundCreate(BaseModel):
    """
    Request to create a named fund.

    branch_id defaults to the caller's own branch; only an
    administrator may name another one.
    """
    name: str = Field(min_length=1, max_length=100)
    kind: FundKind = FundKind.OTHER
    branch_id: int | None = None


class FundResponse(BaseModel):
    id: int
    branch_id: int
    branch_name: str
    name: str
    kind: FundKind
    current_balance: Decimal
    is_system: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class FundBalanceResponse(BaseModel):
    fund_id: int
    name: str
    balance: Decimal
