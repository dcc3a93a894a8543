"""Fixtures for use-case tests: an in-memory stand-in for HubSpot company records."""

from __future__ import annotations

from typing import Any, Iterable

import pytest

from src.arsync.errors import RemoteApiError
from src.arsync.integrations.hubspot_client import company_from_payload
from src.arsync.models import CrmCompany


class InMemoryHubSpot:
    """Implements search/create/update over a dict of company properties."""

    def __init__(self, companies: dict[str, dict[str, Any]] | None = None) -> None:
        self.companies: dict[str, dict[str, Any]] = {
            cid: dict(props) for cid, props in (companies or {}).items()
        }
        self.fail_update_ids: set[str] = set()
        self.searches: list[tuple[str, str, str, int]] = []
        self.creates: list[dict[str, Any]] = []
        self.updates: list[tuple[str, dict[str, Any]]] = []
        self._next_id = 1000

    def _company(self, cid: str) -> CrmCompany:
        return company_from_payload({"id": cid, "properties": self.companies[cid]})

    def search(
        self,
        filter_field: str,
        operator: str,
        value: str,
        properties: Iterable[str] | None = None,
        limit: int = 1,
    ) -> list[CrmCompany]:
        self.searches.append((filter_field, operator, value, limit))
        out = []
        for cid, props in self.companies.items():
            current = str(props.get(filter_field) or "")
            if operator == "EQ" and current == value:
                out.append(self._company(cid))
            elif operator == "CONTAINS_TOKEN" and value.lower() in current.lower().split():
                out.append(self._company(cid))
        return out[:limit]

    def create(self, properties: dict[str, Any]) -> CrmCompany:
        self._next_id += 1
        cid = str(self._next_id)
        self.companies[cid] = dict(properties)
        self.creates.append(dict(properties))
        return self._company(cid)

    def update(self, company_id: str, properties: dict[str, Any]) -> CrmCompany:
        if company_id in self.fail_update_ids:
            raise RemoteApiError("HubSpot API HTTP 500: boom", status_code=500)
        if company_id not in self.companies:
            raise RemoteApiError("HubSpot API HTTP 404: not found", status_code=404)
        self.companies[company_id].update(properties)
        self.updates.append((company_id, dict(properties)))
        return self._company(company_id)


@pytest.fixture
def hubspot_factory():
    return InMemoryHubSpot
