"""
Ledger service: the only writer of fund balances.

This service enforces the balance rules:
1. Every entry records the fund balance before and after it
2. A new entry never drives a fund below zero
3. The entry and the new cached balance are written together
4. Tithes and offerings always land in the general-cash fund

Fund rows are read with SELECT ... FOR UPDATE, so two concurrent
postings to the same fund are serialized by the database. The
caller owns the transaction and must commit after a successful
call, or roll back after a failure.
"""

import logging
from collections import defaultdict
from datetime import datetime
from decimal import Decimal, InvalidOperation

from sqlalchemy import select
from sqlalchemy.orm import Session

from church_ledger.errors import (
    AuthorizationError,
    ConsistencyError,
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
    entry_not_found,
)
from church_ledger.models.entry import Entry, SYSTEM_PERSON_NAME
from church_ledger.models.enums import FundKind
from church_ledger.models.fund import Fund
from church_ledger.money import ZERO, to_money
from church_ledger.schemas.archive import ResetResponse
from church_ledger.schemas.branch import Caller
from church_ledger.schemas.entry import EntryCreate, EntryUpdate
from church_ledger.services import audit
from church_ledger.services.branch_service import BranchService

logger = logging.getLogger(__name__)

RESET_DESCRIPTION = "Administrative reset"


class LedgerService:
    """
    All balance changes pass through this service.

    The service takes a database session as a constructor
    argument. The caller controls the transaction boundary.
    """

    def __init__(self, db: Session):
        self.db = db
        self.branch_service = BranchService(db)

    # --- Locking helpers ---

    def _lock_fund(self, fund_id: int) -> Fund | None:
        # populate_existing refreshes an already-loaded row with the
        # values read under the lock
        return self.db.execute(
            select(Fund)
            .where(Fund.id == fund_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def _lock_entry(self, entry_id: int) -> Entry:
        return self.db.execute(
            select(Entry)
            .where(Entry.id == entry_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one()

    def _lock_general_cash(self, branch_id: int) -> Fund:
        fund = self.db.execute(
            select(Fund)
            .where(Fund.branch_id == branch_id, Fund.is_system.is_(True))
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

        if not fund:
            raise ConsistencyError(
                f"General-cash fund missing for branch {branch_id}"
            )
        return fund

    def lock_branch_funds(self, branch_id: int) -> list[Fund]:
        """Load and lock every fund of a branch, in id order."""
        funds = self.db.execute(
            select(Fund)
            .where(Fund.branch_id == branch_id)
            .order_by(Fund.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalars().all()
        return list(funds)

    # --- Validation ---

    @staticmethod
    def _validate_amount(amount) -> Decimal:
        """
        Return the amount rounded to cents.

        Must be a finite number that is still positive after
        rounding.
        """
        try:
            value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError(f"Invalid amount: {amount!r}")

        if not value.is_finite() or value <= 0:
            raise ValidationError(f"Amount must be a positive number: {amount}")

        rounded = to_money(value)
        if rounded <= 0:
            raise ValidationError(f"Amount rounds to zero: {amount}")
        return rounded

    def _resolve_target_fund(
        self, caller: Caller, kind: FundKind, fund_id: int | None
    ) -> Fund:
        """Pick and lock the fund an entry of this kind is posted to."""
        if kind.rule.routes_to_general_cash:
            # Administrative branches hold no funds
            if caller.is_admin:
                raise ValidationError(
                    f"Administrative branches cannot receive {kind.value} entries"
                )
            return self._lock_general_cash(caller.branch_id)

        if fund_id is None:
            raise ValidationError(f"A fund is required for {kind.value} entries")

        fund = self._lock_fund(fund_id)
        if not fund:
            raise ValidationError(f"Fund {fund_id} does not exist")
        if fund.branch_id != caller.branch_id and not caller.is_admin:
            raise AuthorizationError(f"Fund {fund_id} belongs to another branch")
        return fund

    # --- Writes ---

    def _append_entry(
        self,
        fund: Fund,
        kind: FundKind,
        amount: Decimal,
        person_name: str,
        description: str | None,
        previous_balance: Decimal,
        new_balance: Decimal,
        posted_at: datetime | None = None,
    ) -> Entry:
        fund_type = self.branch_service.get_or_create_fund_type(kind)
        entry = Entry(
            fund=fund,
            branch_id=fund.branch_id,
            fund_type=fund_type,
            amount=amount,
            description=description,
            person_name=person_name,
            previous_balance=previous_balance,
            new_balance=new_balance,
            posted_at=posted_at or datetime.utcnow(),
        )
        self.db.add(entry)
        fund.current_balance = new_balance
        self.db.flush()
        return entry

    def post_entry(self, caller: Caller, request: EntryCreate) -> Entry:
        """
        Post a single entry and move the fund balance.

        If any check fails, nothing is written. The caller is
        responsible for calling db.commit() after this method
        returns successfully.
        """
        kind = request.kind
        if not kind.rule.postable:
            raise ValidationError(f"{kind.value} entries cannot be posted")

        amount = self._validate_amount(request.amount)
        fund = self._resolve_target_fund(caller, kind, request.fund_id)

        previous_balance = to_money(fund.current_balance)
        new_balance = to_money(previous_balance + amount * kind.sign)

        if new_balance < 0:
            raise InsufficientBalanceError(
                f"Insufficient balance: available={previous_balance}, "
                f"requested={amount}"
            )

        entry = self._append_entry(
            fund,
            kind,
            amount,
            request.person_name,
            request.description,
            previous_balance,
            new_balance,
        )
        logger.info(
            "Posted %s %s to fund %s: %s -> %s",
            kind.value, amount, fund.id, previous_balance, new_balance,
        )
        return entry

    def update_entry(
        self, caller: Caller, entry_id: int, request: EntryUpdate
    ) -> Entry:
        """
        Correct an entry's amount, description and person.

        The fund balance moves by the signed difference between the
        new and old amount. The snapshot pair of this and every other
        entry stays as posted, and the result is not checked against
        zero: corrections are trusted.
        """
        entry = self.db.get(Entry, entry_id)
        if not entry:
            raise NotFoundError(entry_not_found(entry_id))
        if entry.branch_id != caller.branch_id and not caller.is_admin:
            raise AuthorizationError(f"Entry {entry_id} belongs to another branch")

        new_amount = self._validate_amount(request.amount)
        fund = self._lock_fund(entry.fund_id)
        if not fund:
            raise ConsistencyError(f"Entry {entry_id} points to a missing fund")

        # Re-read under the fund lock; a concurrent correction may have
        # committed since the first read
        entry = self._lock_entry(entry_id)

        old_amount = to_money(entry.amount)
        delta = new_amount - old_amount
        fund.current_balance = to_money(
            to_money(fund.current_balance) + delta * entry.kind.sign
        )

        entry.amount = new_amount
        entry.description = request.description
        entry.person_name = request.person_name
        entry.corrected_at = datetime.utcnow()

        audit.record_event(
            self.db,
            audit.ENTRY_CORRECTED,
            entry_id=entry.id,
            fund_id=fund.id,
            old_amount=old_amount,
            new_amount=new_amount,
        )
        self.db.flush()

        if fund.current_balance < 0:
            logger.warning(
                "Correction of entry %s left fund %s negative: %s",
                entry.id, fund.id, fund.current_balance,
            )
        logger.info(
            "Corrected entry %s: %s -> %s (fund %s now %s)",
            entry.id, old_amount, new_amount, fund.id, fund.current_balance,
        )
        return entry

    def zero_fund(
        self, fund: Fund, at: datetime, description: str
    ) -> Entry | None:
        """
        Bring a fund to exactly zero with one balancing entry.

        A positive balance is withdrawn, a negative one deposited.
        A fund already at zero is left alone and None is returned.
        The fund must already be locked by the caller.
        """
        balance = to_money(fund.current_balance)
        if balance == 0:
            return None

        kind = FundKind.WITHDRAWAL if balance > 0 else FundKind.DEPOSIT
        return self._append_entry(
            fund,
            kind,
            abs(balance),
            SYSTEM_PERSON_NAME,
            description,
            balance,
            ZERO,
            posted_at=at,
        )

    def reset_branch_funds(
        self, branch_id: int, description: str = RESET_DESCRIPTION
    ) -> ResetResponse:
        """
        Zero every fund of a branch outside the monthly cycle.

        No archive is written. Returns the per-kind sums of the
        fund balances after the reset.
        """
        self.branch_service.get_branch(branch_id)
        at = datetime.utcnow()

        funds = self.lock_branch_funds(branch_id)
        created = 0
        for fund in funds:
            if self.zero_fund(fund, at, description) is not None:
                created += 1

        balances_by_kind: dict[FundKind, Decimal] = defaultdict(lambda: ZERO)
        for fund in funds:
            balances_by_kind[fund.kind] = to_money(
                balances_by_kind[fund.kind] + fund.current_balance
            )

        audit.record_event(
            self.db,
            audit.FUNDS_RESET,
            branch_id=branch_id,
            entries_created=created,
        )
        self.db.flush()
        logger.info(
            "Reset %s fund(s) of branch %s with %s balancing entries",
            len(funds), branch_id, created,
        )
        return ResetResponse(
            branch_id=branch_id,
            entries_created=created,
            balances_by_kind=dict(balances_by_kind),
        )
