"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from church_ledger.models.base import Base
from church_ledger.models.enums import FundKind, KIND_RULES, REVENUE_KINDS
from church_ledger.models.audit_log import AuditLog
from church_ledger.models.branch import Branch
from church_ledger.models.fund_type import FundType
from church_ledger.models.fund import Fund, GENERAL_CASH_NAME
from church_ledger.models.entry import Entry, SYSTEM_PERSON_NAME
from church_ledger.models.archive import MonthlyArchive, MonthlyFundArchive

__all__ = [
    "Base",
    "FundKind",
    "KIND_RULES",
    "REVENUE_KINDS",
    "AuditLog",
    "Branch",
    "FundType",
    "Fund",
    "GENERAL_CASH_NAME",
    "Entry",
    "SYSTEM_PERSON_NAME",
    "MonthlyArchive",
    "MonthlyFundArchive",
]
