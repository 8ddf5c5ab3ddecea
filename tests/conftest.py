"""
Shared test fixtures.

Sets up an isolated SQLite database so tests never touch the
real one. Tables are created before each test and dropped after.
"""

import os

# Must be set before church_ledger builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from church_ledger.main import app
from church_ledger.models.base import Base, get_db
from church_ledger.models.branch import Branch
from church_ledger.schemas.branch import BranchCreate, Caller
from church_ledger.schemas.fund import FundCreate
from church_ledger.models.enums import FundKind
from church_ledger.services.branch_service import BranchService
from church_ledger.services.fund_service import FundService


TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(db_session):
    """
    Provide a test client bound to the test session.

    get_db is overridden so routers and the test share one session.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# --- Helpers shared by service and API tests ---

def make_branch(db, name, is_admin=False, password="secret1") -> Branch:
    return BranchService(db).create_branch(BranchCreate(
        name=name, password=password, is_admin=is_admin,
    ))


def caller_for(branch: Branch) -> Caller:
    return Caller(branch_id=branch.id, is_admin=branch.is_admin)


def make_fund(db, branch, name, kind=FundKind.OTHER):
    return FundService(db).create_fund(
        caller_for(branch), FundCreate(name=name, kind=kind)
    )


def headers_for(branch: Branch) -> dict:
    return {"X-Branch-Id": str(branch.id)}
