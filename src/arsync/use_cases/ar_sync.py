"""Reconcile NetSuite receivable balances into HubSpot companies.

One run:
- fetch the receivable records (a failure here aborts the run)
- for each record, in NetSuite's order: match, then update / create / skip
- count outcomes; one record's failure never stops the batch

Records are processed strictly one at a time with a fixed pause between them
to stay under HubSpot's rate limit.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Protocol

from src.arsync.config.settings import SyncSettings, UnmatchedPolicy
from src.arsync.integrations.hubspot_client import (
    PROP_LEGAL_NAME,
    PROP_NAME,
    PROP_NETSUITE_ID,
    PROP_PAST_DUE,
    PROP_TOTAL_AR,
    HubSpotClient,
)
from src.arsync.integrations.netsuite_client import NetSuiteClient
from src.arsync.integrations.netsuite_receivables import fetch_receivables
from src.arsync.models import (
    CrmCompany,
    MatchResult,
    ReceivableRecord,
    SyncOutcome,
    round_money,
)
from src.arsync.use_cases.company_matcher import CompanyMatcher

logger = logging.getLogger(__name__)


class CompanyResolver(Protocol):
    def resolve(self, external_customer_id: str, display_name: str) -> MatchResult: ...


class CompanyWriter(Protocol):
    def create(self, properties: dict[str, Any]) -> CrmCompany: ...

    def update(self, company_id: str, properties: dict[str, Any]) -> CrmCompany: ...


def financial_properties(record: ReceivableRecord) -> dict[str, str]:
    """Properties written on every update and create (balances rounded to cents)."""

    return {
        PROP_NETSUITE_ID: str(record.external_customer_id),
        PROP_LEGAL_NAME: record.display_name,
        PROP_TOTAL_AR: str(round_money(record.total_balance)),
        PROP_PAST_DUE: str(round_money(record.past_due_balance)),
    }


class ArSyncService:
    def __init__(
        self,
        *,
        fetch_records: Callable[[], list[ReceivableRecord]],
        matcher: CompanyResolver,
        crm: CompanyWriter,
        unmatched_policy: UnmatchedPolicy = UnmatchedPolicy.CREATE,
        pacing_seconds: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._fetch_records = fetch_records
        self._matcher = matcher
        self._crm = crm
        self._unmatched_policy = unmatched_policy
        self._pacing_seconds = pacing_seconds
        self._sleep = sleep

    def _sync_one(self, record: ReceivableRecord, outcome: SyncOutcome) -> None:
        match = self._matcher.resolve(record.external_customer_id, record.display_name)
        properties = financial_properties(record)

        if match.company is not None:
            self._crm.update(match.company.id, properties)
            outcome.updated += 1
            logger.info(
                "  UPDATED (%s) %s: AR balance %s",
                match.match_basis.value,
                match.company.id,
                properties[PROP_TOTAL_AR],
            )
            return

        if self._unmatched_policy == UnmatchedPolicy.SKIP:
            outcome.not_found += 1
            logger.info("  NOT FOUND: skipped (company creation is manual)")
            return

        if not record.display_name.strip():
            raise ValueError(
                f"Cannot create a company for NetSuite customer {record.external_customer_id} without a name"
            )
        properties[PROP_NAME] = record.display_name
        created = self._crm.create(properties)
        outcome.created += 1
        logger.info(
            "  CREATED: new HubSpot id %s - AR balance %s", created.id, properties[PROP_TOTAL_AR]
        )

    def run_sync(self) -> SyncOutcome:
        started = datetime.now(timezone.utc)
        logger.info("Starting AR sync: %s", started.isoformat())

        records = self._fetch_records()
        logger.info("Found %s customers with AR balances", len(records))

        outcome = SyncOutcome()
        for i, record in enumerate(records):
            if i > 0 and self._pacing_seconds > 0:
                self._sleep(self._pacing_seconds)

            logger.info(
                "Processing: %s (NS ID: %s)", record.display_name, record.external_customer_id
            )
            try:
                self._sync_one(record, outcome)
            except Exception:
                outcome.errors += 1
                logger.exception("  ERROR processing %s", record.display_name)

        logger.info(
            "AR sync complete in %.1fs: updated=%s created=%s not_found=%s errors=%s",
            (datetime.now(timezone.utc) - started).total_seconds(),
            outcome.updated,
            outcome.created,
            outcome.not_found,
            outcome.errors,
        )
        return outcome


def build_ar_sync_service(settings: SyncSettings) -> ArSyncService:
    """Wire the production NetSuite/HubSpot collaborators from one settings object."""

    netsuite = NetSuiteClient.from_settings(settings)
    hubspot = HubSpotClient.from_settings(settings)

    def fetch_records() -> list[ReceivableRecord]:
        return fetch_receivables(netsuite, rest_fallback=settings.netsuite_rest_fallback)

    return ArSyncService(
        fetch_records=fetch_records,
        matcher=CompanyMatcher(hubspot, settings.name_match_policy),
        crm=hubspot,
        unmatched_policy=settings.unmatched_policy,
        pacing_seconds=settings.pacing_seconds,
    )
