"""
Reconciliation: check cached fund balances against entry history.

Balancing entries from resets are ordinary entries, so the signed
sum of every entry ever posted to a fund must equal its cached
balance. Corrections keep that sum right but leave the snapshot
chain broken at the corrected entry; those breaks are counted, not
treated as errors.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from church_ledger.models.entry import Entry
from church_ledger.models.fund import Fund
from church_ledger.money import ZERO, to_money
from church_ledger.schemas.report import BranchReconciliation, FundReconciliation
from church_ledger.services.branch_service import BranchService
from church_ledger.services.fund_service import FundService

logger = logging.getLogger(__name__)


class ReconciliationService:

    def __init__(self, db: Session):
        self.db = db

    def _reconcile(self, fund: Fund) -> FundReconciliation:
        entries = self.db.execute(
            select(Entry)
            .where(Entry.fund_id == fund.id)
            .order_by(Entry.posted_at, Entry.id)
        ).scalars().all()

        expected = ZERO
        breaks = 0
        previous_new = None
        for entry in entries:
            expected += entry.signed_amount
            if previous_new is not None and entry.previous_balance != previous_new:
                breaks += 1
            previous_new = entry.new_balance

        cached = to_money(fund.current_balance)
        expected = to_money(expected)
        result = FundReconciliation(
            fund_id=fund.id,
            name=fund.name,
            cached_balance=cached,
            expected_balance=expected,
            difference=to_money(cached - expected),
            entry_count=len(entries),
            snapshot_breaks=breaks,
        )
        if not result.is_consistent:
            logger.warning(
                "Fund %s cached balance %s differs from history %s",
                fund.id, cached, expected,
            )
        return result

    def reconcile_fund(self, fund_id: int) -> FundReconciliation:
        fund = FundService(self.db).get_fund(fund_id)
        return self._reconcile(fund)

    def reconcile_branch(self, branch_id: int) -> BranchReconciliation:
        BranchService(self.db).get_branch(branch_id)

        funds = self.db.execute(
            select(Fund).where(Fund.branch_id == branch_id).order_by(Fund.id)
        ).scalars().all()

        results = [self._reconcile(fund) for fund in funds]
        return BranchReconciliation(
            branch_id=branch_id,
            funds=results,
            is_consistent=all(r.is_consistent for r in results),
        )
