"""
Pydantic schemas for read-only reports.
"""

from decimal import Decimal

from pydantic import BaseModel

from church_ledger.models.enums import FundKind


class BranchAggregate(BaseModel):
    branch_id: int
    name: str
    balance: Decimal


class KindTotal(BaseModel):
    kind: FundKind
    total: Decimal


class AdminOverview(BaseModel):
    branches: list[BranchAggregate]
    type_totals: list[KindTotal]
    total_balance: Decimal


class BranchMonthTotal(BaseModel):
    branch_id: int
    name: str
    total_balance: Decimal


class BranchMonthReport(BaseModel):
    month_year: str
    branches: list[BranchMonthTotal]
    total_balance: Decimal


class FundReconciliation(BaseModel):
    fund_id: int
    name: str
    cached_balance: Decimal
    expected_balance: Decimal
    difference: Decimal
    entry_count: int
    snapshot_breaks: int

    @property
    def is_consistent(self) -> bool:
        return self.difference == 0


class BranchReconciliation(BaseModel):
    branch_id: int
    funds: list[FundReconciliation]
    is_consistent: bool
