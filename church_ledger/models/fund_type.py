"""
Fund type reference data.

One row per FundKind. Rows are created lazily the first time a
kind is needed and never change afterwards.
"""

from sqlalchemy import String, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from church_ledger.models.base import Base
from church_ledger.models.enums import FundKind


class FundType(Base):
    __tablename__ = "fund_types"

    id: Mapped[int] = mapped_column(primary_key=True)
    kind: Mapped[FundKind] = mapped_column(
        SAEnum(FundKind, name="fund_kind_enum", create_constraint=True),
        unique=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)

    def __repr__(self) -> str:
        return f"<FundType {self.kind.value}>"
