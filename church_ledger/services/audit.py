"""Append audit records within the caller's transaction."""

import json

from sqlalchemy.orm import Session

from church_ledger.models.audit_log import AuditLog

MONTHLY_ARCHIVE = "MONTHLY_ARCHIVE"
FUNDS_RESET = "FUNDS_RESET"
ENTRY_CORRECTED = "ENTRY_CORRECTED"


def record_event(db: Session, event_type: str, **details) -> AuditLog:
    record = AuditLog(
        event_type=event_type,
        details=json.dumps(details, default=str, sort_keys=True),
    )
    db.add(record)
    return record
