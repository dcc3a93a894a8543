"""Domain records shared by the integrations and the use-case layer."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

CENTS = Decimal("0.01")


def round_money(amount: Decimal) -> Decimal:
    """Round a monetary amount to two decimal places (half-up, like a ledger)."""

    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True, slots=True)
class ReceivableRecord:
    external_customer_id: str
    display_name: str
    total_balance: Decimal
    past_due_balance: Decimal


@dataclass(frozen=True, slots=True)
class CrmCompany:
    id: str
    name: str
    external_customer_id: str | None = None
    total_balance: Decimal | None = None
    past_due_balance: Decimal | None = None


class MatchBasis(str, Enum):
    BY_ID = "by-id"
    BY_NAME = "by-name"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class MatchResult:
    company: CrmCompany | None
    match_basis: MatchBasis

    @property
    def matched(self) -> bool:
        return self.company is not None


@dataclass(slots=True)
class SyncOutcome:
    updated: int = 0
    created: int = 0
    not_found: int = 0
    errors: int = 0

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)
