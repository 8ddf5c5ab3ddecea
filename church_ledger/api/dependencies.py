"""
Request-scoped dependencies shared by the routers.

Authentication itself happens upstream. The authenticating proxy
forwards the branch id in the X-Branch-Id header; this module turns
it into a Caller.
"""

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from church_ledger.models.base import get_db
from church_ledger.models.branch import Branch
from church_ledger.schemas.branch import Caller
from church_ledger.services.branch_service import BranchService


def get_caller(
    x_branch_id: int | None = Header(default=None),
    db: Session = Depends(get_db),
) -> Caller:
    """
    Resolve the authenticated branch.

    A congregation's general-cash fund is created here on first
    access if it does not exist yet.
    """
    if x_branch_id is None:
        raise HTTPException(status_code=401, detail="Missing X-Branch-Id header")

    branch = db.get(Branch, x_branch_id)
    if not branch:
        raise HTTPException(status_code=401, detail="Unknown branch")

    caller = Caller(branch_id=branch.id, is_admin=branch.is_admin)
    if not branch.is_admin:
        BranchService(db).ensure_general_cash(branch.id)
        db.commit()
    return caller


def require_admin(caller: Caller = Depends(get_caller)) -> Caller:
    if not caller.is_admin:
        raise HTTPException(status_code=403, detail="Administrator access required")
    return caller
