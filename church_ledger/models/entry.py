"""
Ledger entry model.

Each entry moves one fund's balance by its amount, in the
direction given by its kind. previous_balance and new_balance are
captured when the entry is posted and never recomputed, not even
when a later correction changes the amount.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from church_ledger.models.base import Base
from church_ledger.models.enums import FundKind

# Person recorded on balancing entries posted by the system
SYSTEM_PERSON_NAME = "System"


class Entry(Base):
    __tablename__ = "entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    fund_id: Mapped[int] = mapped_column(
        ForeignKey("funds.id"), nullable=False, index=True
    )
    branch_id: Mapped[int] = mapped_column(
        ForeignKey("branches.id"), nullable=False, index=True
    )
    fund_type_id: Mapped[int] = mapped_column(
        ForeignKey("fund_types.id"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    person_name: Mapped[str] = mapped_column(String(150), nullable=False)
    previous_balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )
    new_balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )
    posted_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, index=True
    )
    corrected_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )

    fund: Mapped["Fund"] = relationship(back_populates="entries")
    branch: Mapped["Branch"] = relationship()
    fund_type: Mapped["FundType"] = relationship()

    @property
    def kind(self) -> FundKind:
        return self.fund_type.kind

    @property
    def signed_amount(self) -> Decimal:
        return self.amount * self.kind.sign

    @property
    def fund_name(self) -> str:
        return self.fund.name

    @property
    def branch_name(self) -> str:
        return self.branch.name

    @property
    def is_system(self) -> bool:
        return self.person_name == SYSTEM_PERSON_NAME

    def __repr__(self) -> str:
        return (
            f"<Entry {self.fund_type.kind.value} {self.amount} "
            f"{self.previous_balance}->{self.new_balance}>"
        )
