"""Source adapter contracts and the parallel source gatherer."""

from account_intel.adapters.base import (
    CalendarSource,
    CallSource,
    ChatSource,
    DataSources,
    DossierRenderer,
    EnrichmentSource,
)
from account_intel.adapters.gatherer import SourceGatherer
from account_intel.adapters.schemas import (
    CalendarAttendee,
    CalendarEventRecord,
    CallRecord,
    ChatMessage,
    CompanyInfo,
    PersonInfo,
)

__all__ = [
    "CalendarAttendee",
    "CalendarEventRecord",
    "CalendarSource",
    "CallRecord",
    "CallSource",
    "ChatMessage",
    "ChatSource",
    "CompanyInfo",
    "DataSources",
    "DossierRenderer",
    "EnrichmentSource",
    "PersonInfo",
    "SourceGatherer",
]
