"""
Archive service: the monthly archive-and-reset batch.

For every congregation the run:
1. Locks and reads every fund
2. Sums the period's tithes and offerings
3. Writes the archive row, then one row per fund carrying its id
4. Zeroes every non-zero fund with a balancing entry

All branches share one transaction. If anything fails for any
branch the caller rolls back and the whole run leaves no trace:
no archives, no balancing entries, no balance changes. The run is
then safe to retry.
"""

import logging
import time
from datetime import datetime

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from church_ledger.config import get_settings
from church_ledger.errors import ValidationError
from church_ledger.models.archive import MonthlyArchive, MonthlyFundArchive
from church_ledger.models.branch import Branch
from church_ledger.models.entry import Entry
from church_ledger.models.enums import FundKind
from church_ledger.models.fund_type import FundType
from church_ledger.money import ZERO, to_money
from church_ledger.schemas.archive import ArchiveRunResponse, ResetResponse
from church_ledger.services import audit
from church_ledger.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)

ZEROING_DESCRIPTION = "Monthly adjustment - zeroing"


def previous_period(now: datetime) -> tuple[datetime, datetime, str]:
    """
    Return (start, end, "YYYY-MM") of the month before `now`.

    `end` is the first instant of the month `now` falls in, so the
    period is the half-open range [start, end).
    """
    end = datetime(now.year, now.month, 1)
    if now.month == 1:
        start = datetime(now.year - 1, 12, 1)
    else:
        start = datetime(now.year, now.month - 1, 1)
    return start, end, f"{start.year:04d}-{start.month:02d}"


class ArchiveService:

    def __init__(self, db: Session):
        self.db = db
        self.ledger_service = LedgerService(db)
        self.settings = get_settings()

    def _period_total(
        self, branch_id: int, kind: FundKind, start: datetime, end: datetime
    ):
        total = self.db.execute(
            select(func.coalesce(func.sum(Entry.amount), 0))
            .join(FundType, Entry.fund_type_id == FundType.id)
            .where(
                Entry.branch_id == branch_id,
                FundType.kind == kind,
                Entry.posted_at >= start,
                Entry.posted_at < end,
            )
        ).scalar()
        return to_money(total)

    def _archive_branch(
        self,
        branch: Branch,
        month_year: str,
        start: datetime,
        end: datetime,
        archived_at: datetime,
    ) -> MonthlyArchive:
        funds = self.ledger_service.lock_branch_funds(branch.id)

        # Fund rows are built before the archive exists and only
        # added once its id is known.
        fund_rows = []
        final_balance = ZERO
        for fund in funds:
            balance = to_money(fund.current_balance)
            fund_rows.append(MonthlyFundArchive(
                fund_id=fund.id,
                fund_name=fund.name,
                initial_balance=balance,
                final_balance=balance,
            ))
            final_balance += balance

        archive = MonthlyArchive(
            branch_id=branch.id,
            month_year=month_year,
            total_tithes=self._period_total(
                branch.id, FundKind.TITHE, start, end
            ),
            total_offerings=self._period_total(
                branch.id, FundKind.OFFERING, start, end
            ),
            final_balance=to_money(final_balance),
            archived_at=archived_at,
        )
        self.db.add(archive)
        self.db.flush()

        for row in fund_rows:
            row.archive = archive
            self.db.add(row)
        self.db.flush()

        zeroed = 0
        for fund in funds:
            entry = self.ledger_service.zero_fund(
                fund, archived_at, ZEROING_DESCRIPTION
            )
            if entry is not None:
                zeroed += 1

        logger.info(
            "Archived branch %s for %s: %s fund(s), final balance %s, "
            "%s balancing entries",
            branch.id, month_year, len(funds), archive.final_balance, zeroed,
        )
        return archive

    def run_monthly_archive(self, now: datetime | None = None) -> ArchiveRunResponse:
        """
        Archive and reset every congregation for the previous month.

        Refuses to run if the period was already archived. Any
        exception propagates with the session left dirty; the caller
        must roll back.
        """
        archived_at = now or datetime.utcnow()
        start, end, month_year = previous_period(archived_at)

        already = self.db.execute(
            select(func.count(MonthlyArchive.id))
            .where(MonthlyArchive.month_year == month_year)
        ).scalar()
        if already:
            raise ValidationError(f"Period {month_year} has already been archived")

        branches = self.db.execute(
            select(Branch)
            .where(Branch.is_admin.is_(False))
            .order_by(Branch.id)
        ).scalars().all()

        if len(branches) > self.settings.ARCHIVE_MAX_BRANCHES:
            logger.warning(
                "Monthly archive over %s branches exceeds the supported "
                "limit of %s",
                len(branches), self.settings.ARCHIVE_MAX_BRANCHES,
            )

        started = time.monotonic()
        archive_ids = []
        for branch in branches:
            archive = self._archive_branch(
                branch, month_year, start, end, archived_at
            )
            archive_ids.append(archive.id)

        audit.record_event(
            self.db,
            audit.MONTHLY_ARCHIVE,
            month_year=month_year,
            archive_ids=archive_ids,
        )
        self.db.flush()

        logger.info(
            "Monthly archive for %s built %s archive(s) in %.2fs",
            month_year, len(archive_ids), time.monotonic() - started,
        )
        return ArchiveRunResponse(month_year=month_year, archive_ids=archive_ids)

    def reset_funds_for_branch(self, branch_id: int) -> ResetResponse:
        """Zero a branch's funds outside the monthly cycle, without archiving."""
        return self.ledger_service.reset_branch_funds(branch_id)
