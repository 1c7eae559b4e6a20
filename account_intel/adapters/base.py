"""Base types for source adapters and renderers.

Adapters fetch raw records from transcript, chat, calendar and research
providers. The pipeline never calls them directly: it is handed the
already-resolved collections in a DataSources bundle.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from account_intel.adapters.schemas import CompanyInfo, PersonInfo

if TYPE_CHECKING:
    from account_intel.models.dossier import Dossier


@dataclass
class DataSources:
    """Raw record collections for one account, any of which may be empty."""

    calls: list[Any] = field(default_factory=list)
    """Call records (dicts or CallRecord)."""

    chat_messages: list[Any] = field(default_factory=list)
    """Chat messages (dicts or ChatMessage)."""

    calendar_events: list[Any] = field(default_factory=list)
    """Calendar events (dicts or CalendarEventRecord)."""

    people: dict[str, PersonInfo] = field(default_factory=dict)
    """Person enrichment keyed by lowercase email."""

    company: CompanyInfo | None = None
    """Company enrichment for the account."""

    failed_sources: list[str] = field(default_factory=list)
    """Names of sources whose adapter raised."""

    def is_empty(self) -> bool:
        """True when no record collection carries any data."""
        return not (self.calls or self.chat_messages or self.calendar_events)

    def sources_used(self) -> list[str]:
        """Names of sources that contributed records."""
        used = []
        if self.calls:
            used.append("calls")
        if self.chat_messages:
            used.append("chat")
        if self.calendar_events:
            used.append("calendar")
        if self.people or self.company:
            used.append("enrichment")
        return used


@runtime_checkable
class CallSource(Protocol):
    """Provider of recorded calls with transcripts."""

    async def fetch_calls(
        self, account_name: str, account_domain: str, days: int
    ) -> list[dict]:
        """Return call records involving the account from the last N days."""
        ...


@runtime_checkable
class ChatSource(Protocol):
    """Provider of internal chat messages."""

    async def fetch_messages(self, account_name: str, days: int) -> list[dict]:
        """Return messages mentioning the account from the last N days."""
        ...


@runtime_checkable
class CalendarSource(Protocol):
    """Provider of calendar events."""

    async def fetch_events(self, account_domain: str, days: int) -> list[dict]:
        """Return events with attendees at the account domain."""
        ...


@runtime_checkable
class EnrichmentSource(Protocol):
    """Provider of external person and company research."""

    async def lookup_person(self, email: str) -> PersonInfo | None:
        """Return research on one person, or None if nothing was found."""
        ...

    async def lookup_company(self, domain: str) -> CompanyInfo | None:
        """Return research on a company, or None if nothing was found."""
        ...


@runtime_checkable
class DossierRenderer(Protocol):
    """Consumer that turns a dossier into a document or message.

    Renderers must treat the dossier as read-only.
    """

    def render(self, dossier: "Dossier") -> str:
        """Render the dossier.

        Args:
            dossier: Assembled dossier

        Returns:
            Rendered output (markdown, HTML, message text)
        """
        ...
