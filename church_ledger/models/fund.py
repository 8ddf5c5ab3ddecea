"""
Fund model (a "group" of money within a branch).

current_balance is a cache. It must always equal the signed sum
of the entries posted to the fund, and only LedgerService writes
it. Zeroing entries are ordinary entries, so the rule holds across
monthly resets.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, Boolean, DateTime, Numeric, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from church_ledger.models.base import Base
from church_ledger.models.enums import FundKind

GENERAL_CASH_NAME = "General Cash"


class Fund(Base):
    __tablename__ = "funds"
    __table_args__ = (
        UniqueConstraint("branch_id", "name", name="uq_funds_branch_name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    branch_id: Mapped[int] = mapped_column(
        ForeignKey("branches.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    fund_type_id: Mapped[int] = mapped_column(
        ForeignKey("fund_types.id"), nullable=False
    )
    current_balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )
    is_system: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    branch: Mapped["Branch"] = relationship(back_populates="funds")
    fund_type: Mapped["FundType"] = relationship()
    entries: Mapped[list["Entry"]] = relationship(back_populates="fund")

    @property
    def kind(self) -> FundKind:
        return self.fund_type.kind

    @property
    def branch_name(self) -> str:
        return self.branch.name

    def __repr__(self) -> str:
        return f"<Fund {self.name} balance={self.current_balance}>"
