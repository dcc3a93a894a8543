"""SuiteQL statements and row parsing for customer receivable balances.

The parsing helpers are deterministic so they can be unit-tested without calling
NetSuite. SuiteQL returns lowercase column aliases and numbers either as JSON
numbers or strings, depending on the column type.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Protocol

from src.arsync.models import ReceivableRecord

logger = logging.getLogger(__name__)

# Open invoice balance per active customer. Amounts are in transaction currency.
AR_BALANCE_QUERY = """
SELECT
  c.id AS customer_id,
  NVL(c.companyname, c.entityid) AS customer_name,
  SUM(t.foreignamountunpaid) AS total_ar_balance,
  SUM(CASE WHEN t.duedate < CURRENT_DATE THEN t.foreignamountunpaid ELSE 0 END) AS past_due_amount
FROM transaction t
INNER JOIN customer c ON c.id = t.entity
WHERE t.type = 'CustInvc'
  AND t.foreignamountunpaid > 0
  AND c.isinactive = 'F'
GROUP BY c.id, c.companyname, c.entityid
ORDER BY SUM(t.foreignamountunpaid) DESC, c.id
""".strip()

# Works with basic role permissions; no balances.
CUSTOMER_LIST_QUERY = """
SELECT
  c.id AS customer_id,
  c.companyname AS customer_name
FROM customer c
WHERE c.isinactive = 'F'
ORDER BY c.companyname, c.id
""".strip()


class SuiteQLSource(Protocol):
    def query_all(self, q: str) -> list[dict[str, Any]]: ...

    def list_customers(self, *, limit: int = 100) -> list[dict[str, Any]]: ...


def parse_amount(value: Any) -> Decimal:
    """Parse a SuiteQL amount. None/blank means zero; commas are ignored.

    Raises ValueError for anything else that is not a number.
    """

    if value is None:
        return Decimal("0")
    s = str(value).replace(",", "").strip()
    if s == "":
        return Decimal("0")
    try:
        amount = Decimal(s)
    except InvalidOperation:
        raise ValueError(f"Not a monetary amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Not a monetary amount: {value!r}")
    return amount


def _first_text(row: dict[str, Any], *keys: str) -> str:
    for key in keys:
        v = row.get(key)
        if v is not None and str(v).strip():
            return str(v).strip()
    return ""


def parse_receivable_row(row: dict[str, Any]) -> ReceivableRecord | None:
    """Convert one SuiteQL/REST row into a ReceivableRecord, or None if unusable."""

    customer_id = _first_text(row, "customer_id", "id")
    if not customer_id:
        logger.warning("Skipping NetSuite row without a customer id: %s", row)
        return None

    try:
        total = parse_amount(row.get("total_ar_balance"))
        past_due = parse_amount(row.get("past_due_amount"))
    except ValueError as e:
        logger.warning("Skipping NetSuite customer %s: %s", customer_id, e)
        return None

    return ReceivableRecord(
        external_customer_id=customer_id,
        display_name=_first_text(
            row, "customer_name", "companyname", "companyName", "entityid", "entityId"
        ),
        total_balance=total,
        past_due_balance=past_due,
    )


def parse_receivable_rows(rows: Iterable[dict[str, Any]]) -> list[ReceivableRecord]:
    out: list[ReceivableRecord] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        record = parse_receivable_row(row)
        if record is not None:
            out.append(record)
    return out


def fetch_receivables(
    client: SuiteQLSource,
    *,
    query: str = AR_BALANCE_QUERY,
    rest_fallback: bool = False,
) -> list[ReceivableRecord]:
    """Fetch receivable records in NetSuite's order.

    With `rest_fallback`, an empty SuiteQL result falls back to the customer
    record list with zero balances. Off by default: it would overwrite real
    balances in HubSpot with zeros.
    """

    logger.info("Running SuiteQL receivables query...")
    rows = client.query_all(query)
    if rows:
        logger.info("SuiteQL returned %s rows", len(rows))
        return parse_receivable_rows(rows)

    if not rest_fallback:
        logger.info("SuiteQL returned no rows")
        return []

    logger.info("SuiteQL returned no rows, trying REST customer list...")
    customers = client.list_customers(limit=100)
    logger.info("REST API returned %s customers", len(customers))
    return parse_receivable_rows(
        {
            "customer_id": c.get("id"),
            "customer_name": c.get("companyName") or c.get("entityId"),
            "total_ar_balance": 0,
            "past_due_amount": 0,
        }
        for c in customers
        if isinstance(c, dict)
    )
