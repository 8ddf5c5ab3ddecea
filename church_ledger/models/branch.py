"""
Branch model.

A branch is one congregation. It owns funds and the entries
posted to them. Administrative branches own no funds and are
skipped by the monthly archive.
"""

from datetime import datetime

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from church_ledger.models.base import Base


class Branch(Base):
    __tablename__ = "branches"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_admin: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    funds: Mapped[list["Fund"]] = relationship(back_populates="branch")

    def __repr__(self) -> str:
        return f"<Branch {self.name}{' (admin)' if self.is_admin else ''}>"
