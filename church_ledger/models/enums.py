"""
Shared enumerations for database models.

FundKind is a closed set. Everything that depends on the kind of
an entry (sign, routing to general cash, whether it can be posted)
is looked up in KIND_RULES, never derived from the display name.
"""

import enum
from dataclasses import dataclass


class FundKind(str, enum.Enum):
    """Categories of funds and entries."""
    TITHE = "TITHE"
    OFFERING = "OFFERING"
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    GENERAL_CASH = "GENERAL_CASH"
    OTHER = "OTHER"

    @property
    def rule(self) -> "KindRule":
        return KIND_RULES[self]

    @property
    def sign(self) -> int:
        return KIND_RULES[self].sign

    @property
    def display_name(self) -> str:
        return KIND_RULES[self].display_name


@dataclass(frozen=True)
class KindRule:
    display_name: str
    # +1 adds to the fund balance, -1 subtracts
    sign: int
    # Entry may be posted by a caller
    postable: bool
    # Always lands in the branch's general-cash fund
    routes_to_general_cash: bool
    # Counted in the archive's period totals
    is_revenue: bool
    # Weight in the per-branch aggregate report
    aggregate_sign: int


KIND_RULES: dict[FundKind, KindRule] = {
    FundKind.TITHE: KindRule("Tithe", 1, True, True, True, 1),
    FundKind.OFFERING: KindRule("Offering", 1, True, True, True, 1),
    FundKind.DEPOSIT: KindRule("Deposit", 1, True, False, False, 1),
    FundKind.WITHDRAWAL: KindRule("Withdrawal", -1, True, False, False, -1),
    FundKind.GENERAL_CASH: KindRule("General Cash", 1, False, False, False, 0),
    FundKind.OTHER: KindRule("Other", 1, True, False, False, 0),
}

REVENUE_KINDS = tuple(k for k, r in KIND_RULES.items() if r.is_revenue)
