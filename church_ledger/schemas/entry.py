"""
Pydantic schemas for ledger entries.

Amounts are accepted with any precision. Rounding to cents
happens once, in LedgerService, so the stored amount and the
balance delta are always the same number.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from church_ledger.models.enums import FundKind


# --- Request Schemas ---

class EntryCreate(BaseModel):
    """
    Request to post an entry.

    fund_id is ignored for tithes and offerings, which always go
    to the branch's general-cash fund.
    """
    kind: FundKind
    amount: Decimal
    person_name: str = Field(min_length=1, max_length=150)
    description: str | None = Field(default=None, max_length=255)
    fund_id: int | None = None


class EntryUpdate(BaseModel):
    """Correction of an existing entry."""
    amount: Decimal
    person_name: str = Field(min_length=1, max_length=150)
    description: str | None = Field(default=None, max_length=255)


# --- Response Schemas ---

class EntryResponse(BaseModel):
    id: int
    fund_id: int
    fund_name: str
    branch_id: int
    branch_name: str
    kind: FundKind
    amount: Decimal
    description: str | None
    person_name: str
    previous_balance: Decimal
    new_balance: Decimal
    posted_at: datetime
    corrected_at: datetime | None

    model_config = {"from_attributes": True}


class PostEntryResponse(BaseModel):
    entry: EntryResponse
    new_balance: Decimal


class UpdateEntryResponse(BaseModel):
    success: bool
    entry: EntryResponse


class EntryPage(BaseModel):
    items: list[EntryResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
