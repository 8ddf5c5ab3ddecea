"""
Report service: read-only projections of the ledger.

Nothing here writes. Fund balances come from the cached value on
the fund; ReconciliationService is the tool that checks that cache
against entry history.
"""

import math
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, func, case
from sqlalchemy.orm import Session

from church_ledger.config import get_settings
from church_ledger.errors import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
    archive_not_found,
    entry_not_found,
)
from church_ledger.models.archive import MonthlyArchive, MonthlyFundArchive
from church_ledger.models.branch import Branch
from church_ledger.models.entry import Entry, SYSTEM_PERSON_NAME
from church_ledger.models.enums import KIND_RULES, REVENUE_KINDS
from church_ledger.models.fund import Fund
from church_ledger.models.fund_type import FundType
from church_ledger.money import ZERO, to_money
from church_ledger.schemas.branch import Caller
from church_ledger.schemas.entry import EntryPage, EntryResponse
from church_ledger.schemas.fund import FundBalanceResponse
from church_ledger.schemas.report import (
    AdminOverview,
    BranchAggregate,
    BranchMonthReport,
    BranchMonthTotal,
    KindTotal,
)
from church_ledger.services.fund_service import FundService


def _aggregate_weight():
    """SQL CASE giving each entry kind its weight in branch totals."""
    return case(
        *[
            (FundType.kind == kind, rule.aggregate_sign)
            for kind, rule in KIND_RULES.items()
            if rule.aggregate_sign
        ],
        else_=0,
    )


def _validate_month_year(month_year: str) -> str:
    try:
        datetime.strptime(month_year, "%Y-%m")
    except ValueError:
        raise ValidationError(f"Invalid period {month_year!r}, expected YYYY-MM")
    return month_year


class ReportService:

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()

    # --- Balances ---

    def get_fund_balance(
        self, fund_id: int, caller: Caller | None = None
    ) -> FundBalanceResponse:
        fund = FundService(self.db).get_fund(fund_id, caller)
        return FundBalanceResponse(
            fund_id=fund.id,
            name=fund.name,
            balance=to_money(fund.current_balance),
        )

    def get_branch_balance(self, branch_id: int) -> Decimal:
        """Sum of the cached balances of a branch's funds."""
        total = self.db.execute(
            select(func.coalesce(func.sum(Fund.current_balance), 0))
            .where(Fund.branch_id == branch_id)
        ).scalar()
        return to_money(total)

    def branch_aggregate_balances(self) -> list[BranchAggregate]:
        """
        Per-congregation total rebuilt from entries.

        Tithes, offerings and deposits add, withdrawals subtract;
        entries of other kinds are left out.
        """
        signed = Entry.amount * _aggregate_weight()
        rows = self.db.execute(
            select(
                Branch.id,
                Branch.name,
                func.coalesce(func.sum(signed), 0),
            )
            .select_from(Branch)
            .outerjoin(Entry, Entry.branch_id == Branch.id)
            .outerjoin(FundType, Entry.fund_type_id == FundType.id)
            .where(Branch.is_admin.is_(False))
            .group_by(Branch.id, Branch.name)
            .order_by(Branch.name)
        ).all()

        return [
            BranchAggregate(branch_id=row[0], name=row[1], balance=to_money(row[2]))
            for row in rows
        ]

    def admin_overview(self, now: datetime | None = None) -> AdminOverview:
        """Branch totals plus this month's tithes and offerings."""
        now = now or datetime.utcnow()
        start = datetime(now.year, now.month, 1)
        if now.month == 12:
            end = datetime(now.year + 1, 1, 1)
        else:
            end = datetime(now.year, now.month + 1, 1)

        branches = self.branch_aggregate_balances()

        rows = self.db.execute(
            select(FundType.kind, func.coalesce(func.sum(Entry.amount), 0))
            .join(FundType, Entry.fund_type_id == FundType.id)
            .where(
                FundType.kind.in_(REVENUE_KINDS),
                Entry.posted_at >= start,
                Entry.posted_at < end,
            )
            .group_by(FundType.kind)
        ).all()
        totals = {kind: to_money(total) for kind, total in rows}

        return AdminOverview(
            branches=branches,
            type_totals=[
                KindTotal(kind=kind, total=totals.get(kind, ZERO))
                for kind in REVENUE_KINDS
            ],
            total_balance=to_money(sum((b.balance for b in branches), ZERO)),
        )

    # --- Entries ---

    def get_entry(self, entry_id: int, caller: Caller | None = None) -> Entry:
        entry = self.db.get(Entry, entry_id)
        if not entry:
            raise NotFoundError(entry_not_found(entry_id))
        if (
            caller is not None
            and not caller.is_admin
            and entry.branch_id != caller.branch_id
        ):
            raise AuthorizationError(f"Entry {entry_id} belongs to another branch")
        return entry

    def list_entries(
        self,
        caller: Caller,
        branch_id: int | None = None,
        fund_id: int | None = None,
        page: int = 1,
        page_size: int | None = None,
    ) -> EntryPage:
        """
        Return one page of entries, newest first.

        Non-admin callers only ever see their own branch. An admin
        may leave branch_id out to list every branch.
        """
        if not caller.is_admin:
            if branch_id is not None and branch_id != caller.branch_id:
                raise AuthorizationError("Not allowed to list another branch")
            branch_id = caller.branch_id

        page = max(page, 1)
        page_size = page_size or self.settings.DEFAULT_PAGE_SIZE
        page_size = min(max(page_size, 1), self.settings.MAX_PAGE_SIZE)

        conditions = []
        if branch_id is not None:
            conditions.append(Entry.branch_id == branch_id)
        if fund_id is not None:
            conditions.append(Entry.fund_id == fund_id)

        total = self.db.execute(
            select(func.count(Entry.id)).where(*conditions)
        ).scalar()

        entries = self.db.execute(
            select(Entry)
            .where(*conditions)
            .order_by(Entry.posted_at.desc(), Entry.id.desc())
            .limit(page_size)
            .offset((page - 1) * page_size)
        ).scalars().all()

        return EntryPage(
            items=[EntryResponse.model_validate(e) for e in entries],
            total=total,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total / page_size),
        )

    def search_fund_entries(
        self,
        fund_id: int,
        person: str = "",
        include_system: bool = False,
        caller: Caller | None = None,
    ) -> list[Entry]:
        """
        Entries of a fund whose person name contains `person`.

        Balancing entries posted by the system are left out unless
        include_system is set.
        """
        FundService(self.db).get_fund(fund_id, caller)

        query = select(Entry).where(Entry.fund_id == fund_id)
        if person:
            query = query.where(
                Entry.person_name.icontains(person, autoescape=True)
            )
        if not include_system:
            query = query.where(Entry.person_name != SYSTEM_PERSON_NAME)

        query = query.order_by(Entry.posted_at.desc(), Entry.id.desc())
        return list(self.db.execute(query).scalars().all())

    # --- Archives ---

    def list_archives(
        self, caller: Caller, month_year: str | None = None
    ) -> list[MonthlyArchive]:
        query = select(MonthlyArchive).join(
            Branch, MonthlyArchive.branch_id == Branch.id
        )
        if month_year:
            query = query.where(
                MonthlyArchive.month_year == _validate_month_year(month_year)
            )
        if not caller.is_admin:
            query = query.where(MonthlyArchive.branch_id == caller.branch_id)

        query = query.order_by(MonthlyArchive.month_year.desc(), Branch.name)
        return list(self.db.execute(query).scalars().all())

    def get_archive_detail(
        self, archive_id: int, caller: Caller | None = None
    ) -> MonthlyArchive:
        """
        Return the archive with its fund rows loaded.

        Fund rows are ordered by fund name through the relationship.
        """
        archive = self.db.get(MonthlyArchive, archive_id)
        if not archive:
            raise NotFoundError(archive_not_found(archive_id))
        if (
            caller is not None
            and not caller.is_admin
            and archive.branch_id != caller.branch_id
        ):
            raise AuthorizationError(f"Archive {archive_id} belongs to another branch")
        return archive

    def branch_month_report(self, month_year: str) -> BranchMonthReport:
        """Per-branch sum of the archived fund balances for one period."""
        _validate_month_year(month_year)

        rows = self.db.execute(
            select(
                Branch.id,
                Branch.name,
                func.coalesce(func.sum(MonthlyFundArchive.final_balance), 0),
            )
            .select_from(MonthlyArchive)
            .join(Branch, MonthlyArchive.branch_id == Branch.id)
            .outerjoin(
                MonthlyFundArchive,
                MonthlyFundArchive.archive_id == MonthlyArchive.id,
            )
            .where(MonthlyArchive.month_year == month_year)
            .group_by(Branch.id, Branch.name)
            .order_by(Branch.name)
        ).all()

        branches = [
            BranchMonthTotal(
                branch_id=row[0], name=row[1], total_balance=to_money(row[2])
            )
            for row in rows
        ]
        return BranchMonthReport(
            month_year=month_year,
            branches=branches,
            total_balance=to_money(
                sum((b.total_balance for b in branches), ZERO)
            ),
        )
