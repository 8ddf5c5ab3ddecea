"""
Audit log model.

Records the ledger events that change balances outside a plain
posting: monthly archives, administrative resets and entry
corrections.
"""

from datetime import datetime

from sqlalchemy import String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from church_ledger.models.base import Base


class AuditLog(Base):
    """
    Immutable record of a ledger event.

    Rows are added in the same transaction as the change they
    describe, so a rolled-back archive leaves no audit row either.
    """

    __tablename__ = "audit_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    event_type: Mapped[str] = mapped_column(String(100), nullable=False)
    details: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
