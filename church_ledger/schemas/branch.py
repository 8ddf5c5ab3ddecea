"""
Pydantic schemas for branch operations.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class Caller(BaseModel):
    """
    The authenticated branch a request acts on behalf of.

    Resolved by the API layer from the upstream authentication;
    services only look at these two fields.
    """
    branch_id: int
    is_admin: bool = False


class BranchCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=6, max_length=128)
    is_admin: bool = False


class BranchRename(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class PasswordChange(BaseModel):
    current_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=1, max_length=128)


class BranchResponse(BaseModel):
    id: int
    name: str
    is_admin: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class BranchBalanceResponse(BaseModel):
    """Sum of the cached balances of every fund in a branch."""
    branch_id: int
    balance: Decimal
