"""Source gatherer for dossier generation.

Collects raw records from every configured adapter in parallel. A failing
adapter contributes an empty collection and is reported in
DataSources.failed_sources; gathering itself never raises.
"""

import asyncio

import structlog

from account_intel.adapters.base import (
    CalendarSource,
    CallSource,
    ChatSource,
    DataSources,
    EnrichmentSource,
)
from account_intel.adapters.schemas import PersonInfo

logger = structlog.get_logger()


class SourceGatherer:
    """Gathers raw account records from the configured adapters."""

    def __init__(
        self,
        call_source: CallSource | None = None,
        chat_source: ChatSource | None = None,
        calendar_source: CalendarSource | None = None,
        enrichment_source: EnrichmentSource | None = None,
    ):
        """Initialize gatherer with optional adapters."""
        self._calls = call_source
        self._chat = chat_source
        self._calendar = calendar_source
        self._enrichment = enrichment_source

    @property
    def configured_sources(self) -> list[str]:
        """Names of the sources that have an adapter."""
        adapters = [
            ("calls", self._calls),
            ("chat", self._chat),
            ("calendar", self._calendar),
            ("enrichment", self._enrichment),
        ]
        return [name for name, adapter in adapters if adapter is not None]

    async def gather(
        self,
        account_name: str,
        account_domain: str,
        attendee_emails: list[str] | None = None,
        days: int = 30,
    ) -> DataSources:
        """Gather every source for one account.

        Args:
            account_name: Account display name
            account_domain: Account email domain
            attendee_emails: External attendees to look up for enrichment
            days: Look-back window in days

        Returns:
            DataSources with possibly-empty collections
        """
        tasks = [
            self._get_calls(account_name, account_domain, days),
            self._get_messages(account_name, days),
            self._get_events(account_domain, days),
            self._get_people(attendee_emails or []),
            self._get_company(account_domain),
        ]

        results = await asyncio.gather(*tasks, return_exceptions=True)

        failed: list[str] = []
        calls = self._extract_result(results[0], "calls", [], failed)
        messages = self._extract_result(results[1], "chat", [], failed)
        events = self._extract_result(results[2], "calendar", [], failed)
        people = self._extract_result(results[3], "people", {}, failed)
        company = self._extract_result(results[4], "company", None, failed)

        logger.info(
            "gathered account sources",
            account=account_name,
            calls_count=len(calls),
            chat_count=len(messages),
            calendar_count=len(events),
            people_count=len(people),
            has_company=company is not None,
            failed=failed,
        )

        return DataSources(
            calls=calls,
            chat_messages=messages,
            calendar_events=events,
            people=people,
            company=company,
            failed_sources=failed,
        )

    def _extract_result(self, result, source_name: str, default, failed: list[str]):
        """Extract result from asyncio.gather, handling exceptions."""
        if isinstance(result, Exception):
            logger.warning(
                "account source failed",
                source=source_name,
                error=str(result),
            )
            failed.append(source_name)
            return default
        return result

    async def _get_calls(
        self, account_name: str, account_domain: str, days: int
    ) -> list[dict]:
        if self._calls is None:
            return []
        return await self._calls.fetch_calls(account_name, account_domain, days)

    async def _get_messages(self, account_name: str, days: int) -> list[dict]:
        if self._chat is None:
            return []
        return await self._chat.fetch_messages(account_name, days)

    async def _get_events(self, account_domain: str, days: int) -> list[dict]:
        if self._calendar is None:
            return []
        return await self._calendar.fetch_events(account_domain, days)

    async def _get_people(self, emails: list[str]) -> dict[str, PersonInfo]:
        """Look up each attendee; a failed lookup just leaves that person out."""
        if self._enrichment is None or not emails:
            return {}

        lookups = await asyncio.gather(
            *(self._enrichment.lookup_person(email) for email in emails),
            return_exceptions=True,
        )

        people: dict[str, PersonInfo] = {}
        for email, info in zip(emails, lookups, strict=True):
            if isinstance(info, Exception):
                logger.warning("person lookup failed", email=email, error=str(info))
                continue
            if info is not None:
                people[email.lower()] = info
        return people

    async def _get_company(self, account_domain: str):
        if self._enrichment is None:
            return None
        return await self._enrichment.lookup_company(account_domain)
