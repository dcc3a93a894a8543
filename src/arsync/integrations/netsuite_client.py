"""NetSuite SuiteTalk REST connector (SuiteQL + record API).

Purpose
- Provide a small, testable wrapper for *read-only* NetSuite calls.
- Every request gets a fresh OAuth 1.0 header from `netsuite_signing`.

The client does not retry and does not interpret HTTP status codes beyond
logging them: a 4xx from SuiteQL usually comes back as a JSON error document
without `items`, which callers see as an empty result.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import urlencode

import requests

from src.arsync.config.settings import NetSuiteCredentials, SyncSettings
from src.arsync.errors import ParseError, TransportError
from src.arsync.integrations.netsuite_signing import generate_auth_header

logger = logging.getLogger(__name__)

SUITEQL_PATH = "/services/rest/query/v1/suiteql"
CUSTOMER_RECORD_PATH = "/services/rest/record/v1/customer"

# SuiteQL refuses page sizes above 1000.
MAX_PAGE_SIZE = 1000


class NetSuiteClient:
    def __init__(
        self,
        *,
        credentials: NetSuiteCredentials,
        timeout_seconds: float = 30,
    ) -> None:
        self._credentials = credentials
        self._timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, settings: SyncSettings) -> "NetSuiteClient":
        return cls(
            credentials=settings.netsuite,
            timeout_seconds=settings.http_timeout_seconds,
        )

    @property
    def base_url(self) -> str:
        return f"https://{self._credentials.host_account}.suitetalk.api.netsuite.com"

    def _auth_header(self, method: str, url: str) -> str:
        creds = self._credentials
        return generate_auth_header(
            http_method=method,
            target_url=url,
            consumer_key=creds.consumer_key,
            consumer_secret=creds.consumer_secret,
            token_id=creds.token_id,
            token_secret=creds.token_secret,
            realm=creds.realm,
        )

    def _request_json(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        if params:
            url = f"{url}?{urlencode(params)}"

        headers = {
            "Authorization": self._auth_header(method, url),
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Prefer": "transient",
        }

        try:
            resp = requests.request(
                method,
                url,
                headers=headers,
                json=body,
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as e:
            logger.error("NetSuite request error: %s %s: %s", method, path, e)
            raise TransportError(f"NetSuite request failed: {e}", {"path": path})

        logger.info("NetSuite response status: %s (%s %s)", resp.status_code, method, path)

        try:
            parsed = resp.json()
        except ValueError:
            logger.warning("NetSuite raw response: %s", resp.text[:500])
            raise ParseError(
                f"NetSuite returned a non-JSON body (HTTP {resp.status_code})",
                raw_body=resp.text,
                status_code=resp.status_code,
            )

        if resp.status_code >= 400:
            logger.error("NetSuite API error: %s", json.dumps(parsed, indent=2)[:2000])
        return parsed

    @staticmethod
    def _items(payload: Any) -> list[dict[str, Any]]:
        items = payload.get("items") if isinstance(payload, dict) else None
        return items if isinstance(items, list) else []

    def query(
        self,
        q: str,
        *,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict[str, Any]]:
        """Run one SuiteQL statement and return the `items` array (or [])."""

        params: dict[str, str] = {}
        if limit is not None:
            params["limit"] = str(int(limit))
        if offset is not None:
            params["offset"] = str(int(offset))

        payload = self._request_json("POST", SUITEQL_PATH, params=params, body={"q": q})
        return self._items(payload)

    def query_all(
        self,
        q: str,
        *,
        page_size: int = MAX_PAGE_SIZE,
        max_pages: int = 50,
    ) -> list[dict[str, Any]]:
        """Run a SuiteQL statement, following `hasMore` across pages."""

        page_size = max(1, min(int(page_size), MAX_PAGE_SIZE))
        rows: list[dict[str, Any]] = []
        offset = 0
        for _ in range(max_pages):
            payload = self._request_json(
                "POST",
                SUITEQL_PATH,
                params={"limit": str(page_size), "offset": str(offset)},
                body={"q": q},
            )
            page = self._items(payload)
            rows.extend(page)
            has_more = isinstance(payload, dict) and bool(payload.get("hasMore"))
            if not has_more or not page:
                break
            offset += len(page)
        else:
            logger.warning("SuiteQL paging stopped after %s pages", max_pages)
        return rows

    def list_customers(self, *, limit: int = 100) -> list[dict[str, Any]]:
        """List customer records via the REST record API (id + links only by default)."""

        payload = self._request_json(
            "GET", CUSTOMER_RECORD_PATH, params={"limit": str(int(limit))}
        )
        return self._items(payload)
