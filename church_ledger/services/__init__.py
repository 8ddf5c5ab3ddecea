"""Business logic services."""

from church_ledger.services.branch_service import BranchService
from church_ledger.services.fund_service import FundService
from church_ledger.services.ledger_service import LedgerService
from church_ledger.services.archive_service import ArchiveService
from church_ledger.services.report_service import ReportService
from church_ledger.services.reconciliation_service import ReconciliationService

__all__ = [
    "BranchService",
    "FundService",
    "LedgerService",
    "ArchiveService",
    "ReportService",
    "ReconciliationService",
]
