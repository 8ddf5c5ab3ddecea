"""
Monthly archive models.

An archive is written once per branch and period by the monthly
archiver, together with one fund row per fund of the branch.
Neither table is updated afterwards.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, Numeric, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from church_ledger.models.base import Base


class MonthlyArchive(Base):
    __tablename__ = "monthly_archives"
    __table_args__ = (
        UniqueConstraint(
            "branch_id", "month_year", name="uq_monthly_archives_period"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    branch_id: Mapped[int] = mapped_column(
        ForeignKey("branches.id"), nullable=False, index=True
    )
    # "YYYY-MM"
    month_year: Mapped[str] = mapped_column(String(7), nullable=False)
    total_tithes: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )
    total_offerings: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )
    final_balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )
    archived_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    branch: Mapped["Branch"] = relationship()
    fund_archives: Mapped[list["MonthlyFundArchive"]] = relationship(
        back_populates="archive",
        order_by="MonthlyFundArchive.fund_name",
    )

    @property
    def branch_name(self) -> str:
        return self.branch.name

    def __repr__(self) -> str:
        return f"<MonthlyArchive branch={self.branch_id} {self.month_year}>"


class MonthlyFundArchive(Base):
    __tablename__ = "monthly_fund_archives"

    id: Mapped[int] = mapped_column(primary_key=True)
    archive_id: Mapped[int] = mapped_column(
        ForeignKey("monthly_archives.id"), nullable=False, index=True
    )
    fund_id: Mapped[int] = mapped_column(
        ForeignKey("funds.id"), nullable=False
    )
    fund_name: Mapped[str] = mapped_column(String(100), nullable=False)
    initial_balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )
    final_balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )

    archive: Mapped["MonthlyArchive"] = relationship(
        back_populates="fund_archives"
    )

    def __repr__(self) -> str:
        return f"<MonthlyFundArchive {self.fund_name} {self.final_balance}>"
