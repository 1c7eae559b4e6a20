"""Merger: folds raw source records into one account history.

Sources are folded in a fixed order (calls, then chat, then calendar) into
a participant registry local to one merge, a timeline and an action item
list. Malformed records are dropped with a warning; the merge never aborts.
"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, datetime

import structlog
from pydantic import BaseModel, ValidationError

from account_intel.adapters.schemas import CalendarEventRecord, CallRecord, ChatMessage
from account_intel.intelligence import thresholds as t
from account_intel.intelligence.action_items import AssigneeResolver, parse_action_items
from account_intel.intelligence.dates import days_between, utc_now
from account_intel.intelligence.emails import extract_domain, is_internal_email
from account_intel.intelligence.schemas import MergedData, MergeOptions
from account_intel.models.account import (
    Account,
    ActionItem,
    ActionItemStatus,
    Contact,
    TimelineEvent,
    TimelineEventType,
)
from account_intel.models.base import as_utc, start_of_day
from account_intel.models.participant import Interaction, InteractionType, Participant

logger = structlog.get_logger()


def _validate_records(
    records: Iterable, model: type[BaseModel], source: str
) -> list:
    """Validate raw records, dropping malformed ones with a warning."""
    valid = []
    for index, record in enumerate(records):
        if isinstance(record, model):
            valid.append(record)
            continue
        try:
            valid.append(model.model_validate(record))
        except ValidationError as e:
            logger.warning(
                "dropping malformed record",
                source=source,
                index=index,
                error=str(e),
            )
    return valid


def get_unique_participant_emails(calls: list[CallRecord]) -> list[str]:
    """All distinct participant addresses across calls, in first-seen order."""
    seen: dict[str, None] = {}
    for call in calls:
        for email in call.participants:
            seen.setdefault(email.lower(), None)
    return list(seen)


def get_external_participant_emails(
    calls: list[CallRecord], internal_domains: list[str]
) -> list[str]:
    """Distinct participant addresses outside our own domains."""
    return [
        email
        for email in get_unique_participant_emails(calls)
        if not is_internal_email(email, internal_domains)
    ]


def mark_overdue_items(items: list[ActionItem], now: datetime) -> list[ActionItem]:
    """Flag pending items whose due date has passed.

    Args:
        items: Parsed action items
        now: Reference time

    Returns:
        New list; overdue items are copies with status and days_overdue set
    """
    marked: list[ActionItem] = []
    for item in items:
        if (
            item.status == ActionItemStatus.PENDING
            and item.due_date is not None
            and item.due_date < now
        ):
            item = item.model_copy(
                update={
                    "status": ActionItemStatus.OVERDUE,
                    "days_overdue": days_between(item.due_date, now),
                }
            )
        marked.append(item)
    return marked


class _Registry:
    """Participant registry keyed by lowercase email, scoped to one merge."""

    def __init__(self, internal_domains: list[str]):
        self._internal = internal_domains
        self.participants: dict[str, Participant] = {}

    def get_or_create(self, email: str, name: str = "") -> Participant | None:
        """Return the participant for an external address, creating it if new.

        Returns None for internal or malformed addresses.
        """
        key = email.strip().lower()
        domain = extract_domain(key)
        if domain is None or is_internal_email(key, self._internal):
            return None

        participant = self.participants.get(key)
        if participant is None:
            participant = Participant(email=key, name=name, company=domain)
            self.participants[key] = participant
        elif name and not participant.name:
            participant.name = name
        return participant

    def known_names(self) -> dict[str, str]:
        """Display name -> email for participants whose name is known."""
        return {p.name: p.email for p in self.participants.values() if p.name}


def _fold_calls(
    calls: list[CallRecord],
    registry: _Registry,
    timeline: list[TimelineEvent],
    action_items: list[ActionItem],
    internal_domains: list[str],
) -> None:
    resolver = AssigneeResolver()
    for call in calls:
        timeline.append(
            TimelineEvent(
                id=f"call-{call.id}",
                date=call.date,
                kind=TimelineEventType.CALL,
                title=call.title,
                description=call.summary,
                participants=call.participants,
                duration_minutes=call.duration_minutes,
                transcript_id=call.id,
            )
        )

        for email in call.participants:
            participant = registry.get_or_create(email)
            if participant is None:
                continue
            participant.interactions.append(
                Interaction(
                    id=f"call-{call.id}",
                    date=call.date,
                    type=InteractionType.CALL,
                    title=call.title,
                    duration_minutes=call.duration_minutes,
                    summary=call.summary,
                )
            )
            participant.total_interactions += 1

        action_items.extend(
            parse_action_items(
                call,
                internal_domains,
                known_names=registry.known_names(),
                resolver=resolver,
            )
        )


def _fold_chat(
    messages: list[ChatMessage],
    timeline: list[TimelineEvent],
    account_name: str,
) -> None:
    by_day: dict[date, list[ChatMessage]] = defaultdict(list)
    for message in messages:
        by_day[message.timestamp.date()].append(message)

    for day in sorted(by_day):
        day_messages = by_day[day]
        if len(day_messages) < t.CHAT_SIGNIFICANT_DAY_MESSAGES:
            continue
        timeline.append(
            TimelineEvent(
                id=f"chat-{day.isoformat()}",
                date=start_of_day(day),
                kind=TimelineEventType.NOTE,
                title=f"{len(day_messages)} chat mentions",
                description=f"Internal discussion about {account_name}",
            )
        )


def _fold_calendar(
    events: list[CalendarEventRecord],
    registry: _Registry,
    timeline: list[TimelineEvent],
    account_domain: str,
) -> None:
    domain = account_domain.lower()
    for event in events:
        if not any(extract_domain(a.email) == domain for a in event.attendees):
            continue

        timeline.append(
            TimelineEvent(
                id=f"cal-{event.id}",
                date=event.start,
                kind=TimelineEventType.MEETING,
                title=event.summary,
                description=event.description,
                participants=[a.email for a in event.attendees],
                duration_minutes=event.duration_minutes,
            )
        )

        for attendee in event.attendees:
            registry.get_or_create(attendee.email, attendee.display_name or "")


def merge_all_data(
    calls: Iterable,
    chat_messages: Iterable,
    calendar_events: Iterable,
    options: MergeOptions,
    now: datetime | None = None,
) -> MergedData:
    """Merge calls, chat messages and calendar events for one account.

    Args:
        calls: Call records (dicts or CallRecord)
        chat_messages: Chat messages (dicts or ChatMessage)
        calendar_events: Calendar events (dicts or CalendarEventRecord)
        options: Account identity, deal data and internal domains
        now: Reference time for the overdue pass (default: current UTC time)

    Returns:
        MergedData with a sorted timeline and a lowercase-keyed registry
    """
    now = utc_now(now)
    internal_domains = options.internal_domains

    valid_calls = _validate_records(calls, CallRecord, "calls")
    valid_messages = _validate_records(chat_messages, ChatMessage, "chat")
    valid_events = _validate_records(calendar_events, CalendarEventRecord, "calendar")

    registry = _Registry(internal_domains)
    timeline: list[TimelineEvent] = []
    action_items: list[ActionItem] = []

    _fold_calls(valid_calls, registry, timeline, action_items, internal_domains)
    _fold_chat(valid_messages, timeline, options.account_name)
    _fold_calendar(valid_events, registry, timeline, options.account_domain)

    # Post-processing
    for participant in registry.participants.values():
        participant.interactions.sort(key=lambda i: i.date, reverse=True)
        if participant.interactions:
            participant.last_interaction_date = participant.interactions[0].date

    timeline.sort(key=lambda e: e.date)
    action_items = mark_overdue_items(action_items, now)

    account = Account(
        id=options.account_domain.lower(),
        name=options.account_name,
        domain=options.account_domain,
        deal_stage=options.deal_stage,
        deal_value=options.deal_value,
        last_contact_date=as_utc(timeline[-1].date) if timeline else None,
        contacts=[
            Contact(id=p.email, email=p.email, name=p.name, title=p.title or None)
            for p in registry.participants.values()
        ],
        timeline=timeline,
        open_action_items=[item for item in action_items if item.is_open],
    )

    logger.info(
        "merged account data",
        account=options.account_name,
        calls=len(valid_calls),
        chat_messages=len(valid_messages),
        calendar_events=len(valid_events),
        timeline_events=len(timeline),
        participants=len(registry.participants),
        action_items=len(action_items),
    )

    return MergedData(
        account=account,
        participants=registry.participants,
        timeline=timeline,
        action_items=action_items,
    )
