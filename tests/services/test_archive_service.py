"""
Tests for the monthly archive and reset.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from church_ledger.errors import ValidationError
from church_ledger.models.archive import MonthlyArchive, MonthlyFundArchive
from church_ledger.models.audit_log import AuditLog
from church_ledger.models.entry import Entry, SYSTEM_PERSON_NAME
from church_ledger.models.enums import FundKind
from church_ledger.models.fund import Fund
from church_ledger.schemas.entry import EntryCreate, EntryUpdate
from church_ledger.services.archive_service import (
    ArchiveService,
    ZEROING_DESCRIPTION,
    previous_period,
)
from church_ledger.services.ledger_service import LedgerService
from church_ledger.services.reconciliation_service import ReconciliationService

from conftest import caller_for, make_branch, make_fund

RUN_AT = datetime(2026, 3, 5, 9, 30)
IN_PERIOD = datetime(2026, 2, 10, 12, 0)
BEFORE_PERIOD = datetime(2026, 1, 20, 12, 0)


def post(db, branch, kind, amount, fund=None, posted_at=None):
    entry = LedgerService(db).post_entry(caller_for(branch), EntryCreate(
        kind=kind,
        amount=Decimal(str(amount)),
        person_name="Maria",
        fund_id=fund.id if fund else None,
    ))
    if posted_at:
        entry.posted_at = posted_at
        db.flush()
    return entry


def seed_branch(db, name="Central"):
    """
    Branch with balances A=100, B=-30 and general cash 50.

    B goes negative through a correction, the only way a balance
    can drop below zero.
    """
    branch = make_branch(db, name)
    fund_a = make_fund(db, branch, "A")
    fund_b = make_fund(db, branch, "B")

    post(db, branch, FundKind.DEPOSIT, 100, fund_a, IN_PERIOD)
    post(db, branch, FundKind.DEPOSIT, 10, fund_b, IN_PERIOD)
    withdrawal = post(db, branch, FundKind.WITHDRAWAL, 10, fund_b, IN_PERIOD)
    LedgerService(db).update_entry(
        caller_for(branch),
        withdrawal.id,
        EntryUpdate(amount=Decimal("40"), person_name="Maria"),
    )
    post(db, branch, FundKind.TITHE, 30, posted_at=IN_PERIOD)
    post(db, branch, FundKind.OFFERING, 20, posted_at=IN_PERIOD)
    db.commit()
    return branch, fund_a, fund_b


class TestPreviousPeriod:

    def test_mid_year(self):
        start, end, month_year = previous_period(datetime(2026, 3, 5))
        assert start == datetime(2026, 2, 1)
        assert end == datetime(2026, 3, 1)
        assert month_year == "2026-02"

    def test_january_rolls_back_to_december(self):
        start, end, month_year = previous_period(datetime(2026, 1, 1, 0, 5))
        assert start == datetime(2025, 12, 1)
        assert end == datetime(2026, 1, 1)
        assert month_year == "2025-12"


class TestRunMonthlyArchive:

    def test_archive_snapshots_and_zeroes_funds(self, db_session):
        branch, fund_a, fund_b = seed_branch(db_session)
        service = ArchiveService(db_session)

        result = service.run_monthly_archive(now=RUN_AT)
        db_session.commit()

        assert result.success is True
        assert result.month_year == "2026-02"
        assert len(result.archive_ids) == 1

        archive = db_session.get(MonthlyArchive, result.archive_ids[0])
        assert archive.branch_id == branch.id
        assert archive.final_balance == Decimal("120.00")
        assert archive.total_tithes == Decimal("30.00")
        assert archive.total_offerings == Decimal("20.00")
        assert archive.archived_at == RUN_AT

        rows = {row.fund_name: row for row in archive.fund_archives}
        assert set(rows) == {"A", "B", "General Cash"}
        assert rows["A"].initial_balance == rows["A"].final_balance == Decimal("100.00")
        assert rows["B"].final_balance == Decimal("-30.00")
        assert rows["General Cash"].final_balance == Decimal("50.00")
        assert sum(r.final_balance for r in rows.values()) == archive.final_balance

        funds = db_session.query(Fund).filter(Fund.branch_id == branch.id).all()
        assert all(f.current_balance == Decimal("0.00") for f in funds)

    def test_balancing_entries_match_sign_of_balance(self, db_session):
        branch, fund_a, fund_b = seed_branch(db_session)

        ArchiveService(db_session).run_monthly_archive(now=RUN_AT)
        db_session.commit()

        balancing = {
            e.fund_id: e
            for e in db_session.query(Entry).filter(
                Entry.person_name == SYSTEM_PERSON_NAME
            )
        }
        assert len(balancing) == 3

        a_entry = balancing[fund_a.id]
        assert a_entry.kind == FundKind.WITHDRAWAL
        assert a_entry.amount == Decimal("100.00")
        assert a_entry.previous_balance == Decimal("100.00")
        assert a_entry.new_balance == Decimal("0.00")
        assert a_entry.description == ZEROING_DESCRIPTION
        assert a_entry.posted_at == RUN_AT

        b_entry = balancing[fund_b.id]
        assert b_entry.kind == FundKind.DEPOSIT
        assert b_entry.amount == Decimal("30.00")
        assert b_entry.previous_balance == Decimal("-30.00")

    def test_zero_funds_get_no_entry(self, db_session):
        branch = make_branch(db_session, "Central")
        make_fund(db_session, branch, "Empty")
        db_session.commit()

        result = ArchiveService(db_session).run_monthly_archive(now=RUN_AT)
        db_session.commit()

        archive = db_session.get(MonthlyArchive, result.archive_ids[0])
        assert archive.final_balance == Decimal("0.00")
        assert len(archive.fund_archives) == 2
        assert db_session.query(Entry).count() == 0

    def test_entries_outside_period_not_counted(self, db_session):
        branch = make_branch(db_session, "Central")
        post(db_session, branch, FundKind.TITHE, 70, posted_at=BEFORE_PERIOD)
        post(db_session, branch, FundKind.TITHE, 5, posted_at=IN_PERIOD)
        db_session.commit()

        result = ArchiveService(db_session).run_monthly_archive(now=RUN_AT)

        archive = db_session.get(MonthlyArchive, result.archive_ids[0])
        assert archive.total_tithes == Decimal("5.00")
        # The balance still includes everything not yet archived
        assert archive.final_balance == Decimal("75.00")

    def test_admin_branches_skipped(self, db_session):
        make_branch(db_session, "Head Office", is_admin=True)
        central = make_branch(db_session, "Central")
        north = make_branch(db_session, "North")
        db_session.commit()

        result = ArchiveService(db_session).run_monthly_archive(now=RUN_AT)

        archives = db_session.query(MonthlyArchive).all()
        assert {a.branch_id for a in archives} == {central.id, north.id}
        assert len(result.archive_ids) == 2

    def test_same_period_refused_twice(self, db_session):
        seed_branch(db_session)
        service = ArchiveService(db_session)
        service.run_monthly_archive(now=RUN_AT)
        db_session.commit()

        with pytest.raises(ValidationError, match="already been archived"):
            service.run_monthly_archive(now=RUN_AT)

    def test_failure_leaves_no_trace(self, db_session, monkeypatch):
        central, fund_a, fund_b = seed_branch(db_session, "Central")
        north, _, _ = seed_branch(db_session, "North")

        original = LedgerService.zero_fund

        def failing_zero_fund(self, fund, at, description):
            if fund.branch_id == north.id:
                raise RuntimeError("connection lost")
            return original(self, fund, at, description)

        monkeypatch.setattr(LedgerService, "zero_fund", failing_zero_fund)

        with pytest.raises(RuntimeError, match="connection lost"):
            ArchiveService(db_session).run_monthly_archive(now=RUN_AT)
        db_session.rollback()

        assert db_session.query(MonthlyArchive).count() == 0
        assert db_session.query(MonthlyFundArchive).count() == 0
        assert db_session.query(AuditLog).filter(
            AuditLog.event_type == "MONTHLY_ARCHIVE"
        ).count() == 0
        assert db_session.query(Entry).filter(
            Entry.person_name == SYSTEM_PERSON_NAME
        ).count() == 0
        assert fund_a.current_balance == Decimal("100.00")
        assert fund_b.current_balance == Decimal("-30.00")

        # A retry after the fault clears succeeds
        monkeypatch.undo()
        result = ArchiveService(db_session).run_monthly_archive(now=RUN_AT)
        db_session.commit()
        assert len(result.archive_ids) == 2

    def test_history_still_reconciles_after_archive(self, db_session):
        branch, _, _ = seed_branch(db_session)

        ArchiveService(db_session).run_monthly_archive(now=RUN_AT)
        db_session.commit()

        report = ReconciliationService(db_session).reconcile_branch(branch.id)
        assert report.is_consistent is True
        assert all(f.cached_balance == Decimal("0.00") for f in report.funds)


class TestResetFundsForBranch:

    def test_reset_writes_no_archive(self, db_session):
        branch, _, _ = seed_branch(db_session)

        result = ArchiveService(db_session).reset_funds_for_branch(branch.id)
        db_session.commit()

        assert result.entries_created == 3
        assert db_session.query(MonthlyArchive).count() == 0
        funds = db_session.query(Fund).filter(Fund.branch_id == branch.id).all()
        assert all(f.current_balance == Decimal("0.00") for f in funds)
