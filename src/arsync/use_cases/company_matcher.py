"""Resolve a NetSuite customer to an existing HubSpot company.

Order (first hit wins)
1) `netsuite_customer_id` equals the NetSuite id -> by-id
2) name fallback, per `NameMatchPolicy`            -> by-name
3) nothing                                         -> none

The id is the durable join key: once a company carries it, later runs always
find it by id, whatever happened to its name. Name matching only links
companies that were never linked before.

`FIRST_TOKEN` searches on the first word of the NetSuite name. It tolerates
punctuation and suffix differences ("S.A." vs "SA") but a generic first word
("Super", "Grupo", "The") can link the wrong company. `EXACT` is the default.

Read-only: nothing here creates or updates a company.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from src.arsync.config.settings import NameMatchPolicy
from src.arsync.integrations.hubspot_client import (
    DEFAULT_COMPANY_PROPERTIES,
    OPERATOR_CONTAINS_TOKEN,
    OPERATOR_EQ,
    PROP_NAME,
    PROP_NETSUITE_ID,
)
from src.arsync.models import CrmCompany, MatchBasis, MatchResult

logger = logging.getLogger(__name__)

NAME_SEARCH_LIMIT = 10


class CompanySearch(Protocol):
    def search(
        self,
        filter_field: str,
        operator: str,
        value: str,
        properties: Iterable[str] | None = None,
        limit: int = 1,
    ) -> list[CrmCompany]: ...


def first_token(display_name: str) -> str:
    parts = (display_name or "").split()
    return parts[0] if parts else ""


def is_linkable(company: CrmCompany, external_customer_id: str | None) -> bool:
    """False when the company already carries a different NetSuite id."""

    if external_customer_id is None or not company.external_customer_id:
        return True
    return str(company.external_customer_id) == str(external_customer_id)


def pick_token_candidate(
    candidates: list[CrmCompany],
    token: str,
    external_customer_id: str | None = None,
) -> CrmCompany | None:
    """First linkable candidate whose name contains `token` (case-insensitive),
    else the first linkable one.
    """

    candidates = [c for c in candidates if is_linkable(c, external_customer_id)]
    if not candidates:
        return None
    needle = token.lower()
    for company in candidates:
        if needle and needle in (company.name or "").lower():
            return company
    return candidates[0]


class CompanyMatcher:
    def __init__(
        self,
        crm: CompanySearch,
        name_policy: NameMatchPolicy = NameMatchPolicy.EXACT,
    ) -> None:
        self._crm = crm
        self._name_policy = name_policy

    @property
    def name_policy(self) -> NameMatchPolicy:
        return self._name_policy

    def _by_id(self, external_customer_id: str) -> CrmCompany | None:
        results = self._crm.search(
            PROP_NETSUITE_ID,
            OPERATOR_EQ,
            str(external_customer_id),
            DEFAULT_COMPANY_PROPERTIES,
            1,
        )
        return results[0] if results else None

    def _by_name(self, display_name: str, external_customer_id: str) -> CrmCompany | None:
        # Companies already linked to another NetSuite customer are never candidates.
        name = (display_name or "").strip()
        if not name:
            return None

        if self._name_policy == NameMatchPolicy.FIRST_TOKEN:
            token = first_token(name)
            results = self._crm.search(
                PROP_NAME,
                OPERATOR_CONTAINS_TOKEN,
                token,
                DEFAULT_COMPANY_PROPERTIES,
                NAME_SEARCH_LIMIT,
            )
            return pick_token_candidate(results, token, external_customer_id)

        results = self._crm.search(
            PROP_NAME, OPERATOR_EQ, name, DEFAULT_COMPANY_PROPERTIES, NAME_SEARCH_LIMIT
        )
        for company in results:
            if is_linkable(company, external_customer_id):
                return company
        if results:
            logger.info(
                "  -> Name matches are linked to other NetSuite customers; not reusing them"
            )
        return None

    def resolve(self, external_customer_id: str, display_name: str) -> MatchResult:
        company = self._by_id(external_customer_id)
        if company is not None:
            logger.info("  -> Found by netsuite_customer_id: %s", company.name)
            return MatchResult(company=company, match_basis=MatchBasis.BY_ID)

        company = self._by_name(display_name, str(external_customer_id))
        if company is not None:
            logger.info("  -> Found by name (%s): %s", self._name_policy.value, company.name)
            return MatchResult(company=company, match_basis=MatchBasis.BY_NAME)

        logger.info("  -> No existing company found")
        return MatchResult(company=None, match_basis=MatchBasis.NONE)
