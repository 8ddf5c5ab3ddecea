"""
Fund service: named funds within a branch.

Balances are not touched here; see LedgerService.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from church_ledger.errors import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
    fund_not_found,
)
from church_ledger.models.enums import FundKind
from church_ledger.models.fund import Fund
from church_ledger.schemas.branch import Caller
from church_ledger.schemas.fund import FundCreate
from church_ledger.services.branch_service import BranchService

logger = logging.getLogger(__name__)


class FundService:

    def __init__(self, db: Session):
        self.db = db
        self.branch_service = BranchService(db)

    def create_fund(self, caller: Caller, request: FundCreate) -> Fund:
        """
        Create a named fund with a zero balance.

        The general-cash fund is managed by the system and cannot
        be created through here.
        """
        branch_id = request.branch_id or caller.branch_id
        if branch_id != caller.branch_id and not caller.is_admin:
            raise AuthorizationError(
                f"Not allowed to create funds for branch {branch_id}"
            )
        if request.kind == FundKind.GENERAL_CASH:
            raise ValidationError("The general-cash fund is created automatically")

        branch = self.branch_service.get_branch(branch_id)
        if branch.is_admin:
            raise ValidationError("Administrative branches do not hold funds")

        existing = self.db.execute(
            select(Fund).where(
                Fund.branch_id == branch_id, Fund.name == request.name
            )
        ).scalar_one_or_none()
        if existing:
            raise ValidationError(
                f"Fund '{request.name}' already exists in branch {branch_id}"
            )

        fund_type = self.branch_service.get_or_create_fund_type(request.kind)
        fund = Fund(
            branch_id=branch_id,
            name=request.name,
            fund_type_id=fund_type.id,
        )
        self.db.add(fund)
        self.db.flush()
        logger.info("Created fund %r in branch %s", fund.name, branch_id)
        return fund

    def get_fund(self, fund_id: int, caller: Caller | None = None) -> Fund:
        """Return a fund, checking the caller may see it when one is given."""
        fund = self.db.get(Fund, fund_id)
        if not fund:
            raise NotFoundError(fund_not_found(fund_id))
        if (
            caller is not None
            and not caller.is_admin
            and fund.branch_id != caller.branch_id
        ):
            raise AuthorizationError(f"Fund {fund_id} belongs to another branch")
        return fund

    def list_funds(
        self, caller: Caller, branch_id: int | None = None
    ) -> list[Fund]:
        """
        General cash first, then by name.

        Admins see every branch unless they pass branch_id.
        """
        if not caller.is_admin:
            if branch_id is not None and branch_id != caller.branch_id:
                raise AuthorizationError("Not allowed to list another branch")
            branch_id = caller.branch_id

        query = select(Fund)
        if branch_id is not None:
            query = query.where(Fund.branch_id == branch_id)
        query = query.order_by(Fund.is_system.desc(), Fund.name)

        return list(self.db.execute(query).scalars().all())
