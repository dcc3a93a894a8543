"""HubSpot CRM v3 connector for company records.

Purpose
- search / create / update companies with a private-app bearer token.
- Turn every failure shape HubSpot produces into one of our error types.

HubSpot occasionally answers 200 with `{"status": "error", ...}`; that is an
error, not a success.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

import requests

from src.arsync.config.settings import SyncSettings
from src.arsync.errors import AuthConfigError, ParseError, RemoteApiError, TransportError
from src.arsync.models import CrmCompany

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.hubapi.com"
COMPANIES_PATH = "/crm/v3/objects/companies"

# HubSpot company properties owned by this sync.
PROP_NAME = "name"
PROP_NETSUITE_ID = "netsuite_customer_id"
PROP_LEGAL_NAME = "netsuite_legal_name"
PROP_TOTAL_AR = "total_ar_balance"
PROP_PAST_DUE = "past_due_amount"

DEFAULT_COMPANY_PROPERTIES = [
    PROP_NAME,
    PROP_NETSUITE_ID,
    PROP_TOTAL_AR,
    PROP_PAST_DUE,
    PROP_LEGAL_NAME,
]

OPERATOR_EQ = "EQ"
OPERATOR_CONTAINS_TOKEN = "CONTAINS_TOKEN"
SUPPORTED_OPERATORS = frozenset({OPERATOR_EQ, OPERATOR_CONTAINS_TOKEN})


def _optional_decimal(value: Any) -> Decimal | None:
    if value is None or str(value).strip() == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def company_from_payload(payload: dict[str, Any]) -> CrmCompany:
    """Build a CrmCompany from a HubSpot object (`{id, properties: {...}}`)."""

    props = payload.get("properties") or {}
    return CrmCompany(
        id=str(payload.get("id") or ""),
        name=str(props.get(PROP_NAME) or ""),
        external_customer_id=props.get(PROP_NETSUITE_ID) or None,
        total_balance=_optional_decimal(props.get(PROP_TOTAL_AR)),
        past_due_balance=_optional_decimal(props.get(PROP_PAST_DUE)),
    )


def _stringify_properties(properties: dict[str, Any]) -> dict[str, str]:
    # HubSpot stores every property value as a string; Decimal is not JSON-serialisable.
    return {k: ("" if v is None else str(v)) for k, v in properties.items()}


class HubSpotClient:
    def __init__(
        self,
        *,
        access_token: str | None,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 30,
    ) -> None:
        self._access_token = access_token
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, settings: SyncSettings) -> "HubSpotClient":
        return cls(
            access_token=settings.hubspot_access_token,
            timeout_seconds=settings.http_timeout_seconds,
        )

    def _request_json(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        if not self._access_token or not self._access_token.strip():
            raise AuthConfigError("HUBSPOT_ACCESS_TOKEN is not set")

        url = f"{self._base_url}{path}"
        try:
            resp = requests.request(
                method,
                url,
                headers={
                    "Authorization": f"Bearer {self._access_token}",
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
                json=body,
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as e:
            logger.error("HubSpot request error: %s %s: %s", method, path, e)
            raise TransportError(f"HubSpot request failed: {e}", {"path": path})

        logger.debug("HubSpot response status: %s - %s %s", resp.status_code, method, path)

        try:
            parsed = resp.json()
        except ValueError:
            if resp.status_code >= 400:
                raise RemoteApiError(
                    f"HubSpot API HTTP {resp.status_code}: {resp.text[:200]}",
                    status_code=resp.status_code,
                    response_body=resp.text,
                )
            logger.error("HubSpot raw response: %s", resp.text[:500])
            raise ParseError(
                "HubSpot API response is not valid JSON",
                raw_body=resp.text,
                status_code=resp.status_code,
            )

        if isinstance(parsed, dict) and parsed.get("status") == "error":
            message = parsed.get("message") or "Unknown error"
            logger.error("HubSpot API error on %s %s: %s", method, path, message)
            raise RemoteApiError(
                f"HubSpot API Error: {message}",
                status_code=resp.status_code,
                response_body=resp.text,
            )

        if resp.status_code >= 400:
            message = parsed.get("message") if isinstance(parsed, dict) else None
            raise RemoteApiError(
                f"HubSpot API HTTP {resp.status_code}: {message or resp.text[:200]}",
                status_code=resp.status_code,
                response_body=resp.text,
            )

        if not isinstance(parsed, dict):
            raise ParseError(
                "HubSpot API response is not a JSON object",
                raw_body=resp.text,
                status_code=resp.status_code,
            )
        return parsed

    def search(
        self,
        filter_field: str,
        operator: str,
        value: str,
        properties: Iterable[str] | None = None,
        limit: int = 1,
    ) -> list[CrmCompany]:
        """Search companies with a single filter. Returns [] when nothing matches."""

        if operator not in SUPPORTED_OPERATORS:
            raise ValueError(
                f"Unsupported operator {operator!r}; expected one of {sorted(SUPPORTED_OPERATORS)}"
            )

        body = {
            "filterGroups": [
                {
                    "filters": [
                        {"propertyName": filter_field, "operator": operator, "value": str(value)}
                    ]
                }
            ],
            "properties": list(properties or DEFAULT_COMPANY_PROPERTIES),
            "limit": int(limit),
        }
        result = self._request_json("POST", f"{COMPANIES_PATH}/search", body)
        return [company_from_payload(r) for r in result.get("results") or [] if isinstance(r, dict)]

    def create(self, properties: dict[str, Any]) -> CrmCompany:
        result = self._request_json(
            "POST", COMPANIES_PATH, {"properties": _stringify_properties(properties)}
        )
        return company_from_payload(result)

    def update(self, company_id: str, properties: dict[str, Any]) -> CrmCompany:
        if not company_id:
            raise ValueError("company_id is required for update")
        result = self._request_json(
            "PATCH",
            f"{COMPANIES_PATH}/{company_id}",
            {"properties": _stringify_properties(properties)},
        )
        return company_from_payload(result)
