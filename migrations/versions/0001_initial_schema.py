"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

fund_kind_enum = sa.Enum(
    "TITHE", "OFFERING", "DEPOSIT", "WITHDRAWAL", "GENERAL_CASH", "OTHER",
    name="fund_kind_enum",
    create_constraint=True,
)


def upgrade() -> None:
    op.create_table(
        "branches",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_admin", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "fund_types",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("kind", fund_kind_enum, nullable=False, unique=True),
        sa.Column("name", sa.String(50), nullable=False),
    )

    op.create_table(
        "funds",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("branch_id", sa.Integer(), sa.ForeignKey("branches.id"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("fund_type_id", sa.Integer(), sa.ForeignKey("fund_types.id"), nullable=False),
        sa.Column("current_balance", sa.Numeric(12, 2), nullable=False),
        sa.Column("is_system", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("branch_id", "name", name="uq_funds_branch_name"),
    )
    op.create_index("ix_funds_branch_id", "funds", ["branch_id"])

    op.create_table(
        "entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("fund_id", sa.Integer(), sa.ForeignKey("funds.id"), nullable=False),
        sa.Column("branch_id", sa.Integer(), sa.ForeignKey("branches.id"), nullable=False),
        sa.Column("fund_type_id", sa.Integer(), sa.ForeignKey("fund_types.id"), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("person_name", sa.String(150), nullable=False),
        sa.Column("previous_balance", sa.Numeric(12, 2), nullable=False),
        sa.Column("new_balance", sa.Numeric(12, 2), nullable=False),
        sa.Column("posted_at", sa.DateTime(), nullable=False),
        sa.Column("corrected_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_entries_fund_id", "entries", ["fund_id"])
    op.create_index("ix_entries_branch_id", "entries", ["branch_id"])
    op.create_index("ix_entries_posted_at", "entries", ["posted_at"])

    op.create_table(
        "monthly_archives",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("branch_id", sa.Integer(), sa.ForeignKey("branches.id"), nullable=False),
        sa.Column("month_year", sa.String(7), nullable=False),
        sa.Column("total_tithes", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_offerings", sa.Numeric(12, 2), nullable=False),
        sa.Column("final_balance", sa.Numeric(12, 2), nullable=False),
        sa.Column("archived_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("branch_id", "month_year", name="uq_monthly_archives_period"),
    )
    op.create_index("ix_monthly_archives_branch_id", "monthly_archives", ["branch_id"])

    op.create_table(
        "monthly_fund_archives",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("archive_id", sa.Integer(), sa.ForeignKey("monthly_archives.id"), nullable=False),
        sa.Column("fund_id", sa.Integer(), sa.ForeignKey("funds.id"), nullable=False),
        sa.Column("fund_name", sa.String(100), nullable=False),
        sa.Column("initial_balance", sa.Numeric(12, 2), nullable=False),
        sa.Column("final_balance", sa.Numeric(12, 2), nullable=False),
    )
    op.create_index(
        "ix_monthly_fund_archives_archive_id", "monthly_fund_archives", ["archive_id"]
    )

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event_type", sa.String(100), nullable=False),
        sa.Column("details", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_index("ix_monthly_fund_archives_archive_id", table_name="monthly_fund_archives")
    op.drop_table("monthly_fund_archives")
    op.drop_index("ix_monthly_archives_branch_id", table_name="monthly_archives")
    op.drop_table("monthly_archives")
    op.drop_index("ix_entries_posted_at", table_name="entries")
    op.drop_index("ix_entries_branch_id", table_name="entries")
    op.drop_index("ix_entries_fund_id", table_name="entries")
    op.drop_table("entries")
    op.drop_index("ix_funds_branch_id", table_name="funds")
    op.drop_table("funds")
    op.drop_table("fund_types")
    op.drop_table("branches")
    fund_kind_enum.drop(op.get_bind(), checkfirst=True)
