"""
Printable financial statements.

Statements are HTML documents rendered from the Jinja2 templates
next to this module; browsers print them to PDF.
"""

from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from church_ledger.config import get_settings
from church_ledger.models.archive import MonthlyArchive
from church_ledger.money import format_money
from church_ledger.schemas.report import BranchMonthReport

TEMPLATES_DIR = Path(__file__).parent / "templates"

_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)
_env.filters["money"] = format_money


def period_label(month_year: str) -> str:
    """'2026-09' -> '2026/09'"""
    return month_year.replace("-", "/")


def _header() -> dict:
    settings = get_settings()
    return {
        "organization_name": settings.ORGANIZATION_NAME,
        "organization_address": settings.ORGANIZATION_ADDRESS,
        "generated_at": datetime.utcnow(),
    }


def render_archive_statement(archive: MonthlyArchive) -> str:
    """Monthly statement of one branch: totals and per-fund balances."""
    template = _env.get_template("archive_statement.html")
    return template.render(
        **_header(),
        archive=archive,
        period=period_label(archive.month_year),
        funds=archive.fund_archives,
    )


def render_branch_month_report(report: BranchMonthReport) -> str:
    """Archived balances of every branch for one period."""
    template = _env.get_template("branch_month_report.html")
    return template.render(
        **_header(),
        report=report,
        period=period_label(report.month_year),
    )
