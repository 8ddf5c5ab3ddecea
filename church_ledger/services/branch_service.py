"""
Branch service: provisioning, credentials, and the general-cash fund.

Every non-admin branch has exactly one general-cash fund. It is
created when the branch is provisioned, and again on demand when
an older branch is missing one.
"""

import logging

import bcrypt
from sqlalchemy import select
from sqlalchemy.orm import Session

from church_ledger.errors import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
    branch_not_found,
)
from church_ledger.models.branch import Branch
from church_ledger.models.enums import FundKind
from church_ledger.models.fund import Fund, GENERAL_CASH_NAME
from church_ledger.models.fund_type import FundType
from church_ledger.schemas.branch import BranchCreate, PasswordChange

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def check_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode(), password_hash.encode())


class BranchService:

    def __init__(self, db: Session):
        self.db = db

    def get_or_create_fund_type(self, kind: FundKind) -> FundType:
        """Return the reference row for a kind, creating it if missing."""
        fund_type = self.db.execute(
            select(FundType).where(FundType.kind == kind)
        ).scalar_one_or_none()

        if not fund_type:
            fund_type = FundType(kind=kind, name=kind.display_name)
            self.db.add(fund_type)
            self.db.flush()
            logger.info("Created fund type %s", kind.value)

        return fund_type

    def create_branch(self, request: BranchCreate) -> Branch:
        """
        Provision a new branch.

        Non-admin branches get their general-cash fund right away.
        """
        existing = self.db.execute(
            select(Branch).where(Branch.name == request.name)
        ).scalar_one_or_none()

        if existing:
            raise ValidationError(
                f"Branch with name '{request.name}' already exists"
            )

        branch = Branch(
            name=request.name,
            password_hash=hash_password(request.password),
            is_admin=request.is_admin,
        )
        self.db.add(branch)
        self.db.flush()

        if not branch.is_admin:
            self.ensure_general_cash(branch.id)

        logger.info("Provisioned branch %s (id=%s)", branch.name, branch.id)
        return branch

    def get_branch(self, branch_id: int) -> Branch:
        branch = self.db.get(Branch, branch_id)
        if not branch:
            raise NotFoundError(branch_not_found(branch_id))
        return branch

    def list_branches(self) -> list[Branch]:
        """All congregations, excluding administrative branches."""
        branches = self.db.execute(
            select(Branch)
            .where(Branch.is_admin.is_(False))
            .order_by(Branch.name)
        ).scalars().all()
        return list(branches)

    def rename_branch(self, branch_id: int, name: str) -> Branch:
        branch = self.get_branch(branch_id)

        clash = self.db.execute(
            select(Branch).where(Branch.name == name, Branch.id != branch_id)
        ).scalar_one_or_none()
        if clash:
            raise ValidationError(f"Branch with name '{name}' already exists")

        branch.name = name
        self.db.flush()
        return branch

    def change_password(self, branch_id: int, request: PasswordChange) -> None:
        branch = self.get_branch(branch_id)

        if not check_password(request.current_password, branch.password_hash):
            raise AuthorizationError("Current password is incorrect")
        if len(request.new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must have at least {MIN_PASSWORD_LENGTH} characters"
            )
        if request.new_password == request.current_password:
            raise ValidationError(
                "New password must differ from the current one"
            )

        branch.password_hash = hash_password(request.new_password)
        self.db.flush()
        logger.info("Password changed for branch %s", branch_id)

    def verify_credentials(self, name: str, password: str) -> Branch:
        """Return the branch if the name and password match."""
        branch = self.db.execute(
            select(Branch).where(Branch.name == name)
        ).scalar_one_or_none()

        if not branch:
            raise NotFoundError(f"Branch '{name}' not found")
        if not check_password(password, branch.password_hash):
            raise AuthorizationError("Incorrect password")
        return branch

    def ensure_general_cash(self, branch_id: int) -> Fund:
        """
        Return the branch's general-cash fund, creating it if absent.

        Idempotent: calling it for a branch that already has the
        fund changes nothing.
        """
        fund = self.db.execute(
            select(Fund).where(
                Fund.branch_id == branch_id,
                Fund.is_system.is_(True),
            )
        ).scalar_one_or_none()

        if fund:
            return fund

        fund_type = self.get_or_create_fund_type(FundKind.GENERAL_CASH)
        fund = Fund(
            branch_id=branch_id,
            name=GENERAL_CASH_NAME,
            fund_type_id=fund_type.id,
            is_system=True,
        )
        self.db.add(fund)
        self.db.flush()
        logger.info("Created general-cash fund for branch %s", branch_id)
        return fund
