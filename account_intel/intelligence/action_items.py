"""Action item block parsing for call records.

Notetakers emit action items as a free-text block grouped under assignee
header lines, for example:

    **Jane Doe**
    Send AWS account IDs (due: Friday)
    Share security questionnaire (12:41)

    andy@runlayer.com
    - Send pricing proposal

Lines are attributed to the most recent header until the next header or
the end of the block.
"""

import re

import structlog
from rapidfuzz import fuzz, process, utils

from account_intel.adapters.schemas import CallRecord
from account_intel.intelligence.dates import normalize_due_date
from account_intel.intelligence.emails import is_external_email
from account_intel.models.account import ActionItem, ActionItemOwner, ActionItemStatus

logger = structlog.get_logger()

_EMAIL = r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+"

# Header forms, tried in order
_BOLD_HEADER = re.compile(r"^\*\*(?P<name>[^*]+?)\*\*:?$")
_LABELED_HEADER = re.compile(r"^(?:assignee|owner)\s*:\s*(?P<name>.+)$", re.IGNORECASE)
_NAME_EMAIL_HEADER = re.compile(rf"^(?P<name>[^<>]*?)\s*<(?P<email>{_EMAIL})>:?$")
_EMAIL_HEADER = re.compile(rf"^(?P<email>{_EMAIL}):?$")
_COLON_HEADER = re.compile(r"^(?P<name>[A-Z][\w.'-]*(?: [A-Z][\w.'-]*){0,3}):$")

_BULLET = re.compile(r"^(?:[-*•]+|\d+[.)])\s*")
_TIMESTAMP = re.compile(r"\s*\(\d{1,2}:\d{2}(?::\d{2})?\)\s*$")
_DUE_CLAUSE = re.compile(r"\s*\(due:?\s*(?P<due>[^)]+)\)\s*$", re.IGNORECASE)
_EMBEDDED_EMAIL = re.compile(_EMAIL)


def _email_to_name(email: str) -> str:
    """Turn jane.doe@acme.com into "jane doe" for name matching."""
    local = email.split("@", 1)[0]
    return re.sub(r"[._-]+", " ", local)


class AssigneeResolver:
    """Resolves assignee names to participant emails using RapidFuzz.

    Uses token_sort_ratio for name order independence, so "Doe, Jane"
    matches jane.doe@acme.com.
    """

    def __init__(self, threshold: float = 0.85):
        """Initialize resolver with match threshold.

        Args:
            threshold: Minimum score (0-1) for a name to resolve.
        """
        self._threshold = threshold

    def resolve(
        self,
        name: str,
        participant_emails: list[str],
        known_names: dict[str, str] | None = None,
    ) -> str | None:
        """Find the participant email that best matches a name.

        Args:
            name: Assignee name from the header line
            participant_emails: Email addresses of the call's participants
            known_names: Display name -> email for already-known participants

        Returns:
            Matching email, or None if nothing scores above threshold
        """
        choices: dict[str, str] = {}
        for email in participant_emails:
            choices.setdefault(_email_to_name(email), email)
        for display_name, email in (known_names or {}).items():
            choices.setdefault(display_name, email)

        if not choices or not name.strip():
            return None

        result = process.extractOne(
            name,
            list(choices.keys()),
            scorer=fuzz.token_sort_ratio,
            processor=utils.default_process,
            score_cutoff=self._threshold * 100,
        )
        if result:
            matched_name, _score, _index = result
            return choices[matched_name]
        return None


def _parse_header(line: str) -> tuple[str | None, str | None] | None:
    """Classify a line as an assignee header.

    Returns:
        (email, name) tuple if the line is a header, else None
    """
    match = _NAME_EMAIL_HEADER.match(line)
    if match:
        return match.group("email").lower(), match.group("name") or None

    match = _EMAIL_HEADER.match(line)
    if match:
        return match.group("email").lower(), None

    for pattern in (_BOLD_HEADER, _LABELED_HEADER, _COLON_HEADER):
        match = pattern.match(line)
        if match:
            name = match.group("name").strip()
            embedded = _EMBEDDED_EMAIL.search(name)
            if embedded:
                return embedded.group(0).lower(), None
            return None, name

    return None


def _clean_item(line: str) -> tuple[str, str | None]:
    """Strip bullets and timestamps; split off a trailing due clause."""
    text = _BULLET.sub("", line)
    text = _TIMESTAMP.sub("", text)
    due_raw = None
    due_match = _DUE_CLAUSE.search(text)
    if due_match:
        due_raw = due_match.group("due").strip()
        text = text[: due_match.start()]
    return text.strip(), due_raw


def parse_action_items(
    call: CallRecord,
    internal_domains: list[str],
    known_names: dict[str, str] | None = None,
    resolver: AssigneeResolver | None = None,
) -> list[ActionItem]:
    """Parse the action item block of one call.

    Ownership is "theirs" only when the resolved assignee is an external
    email address. Items with no header, or a name that did not resolve
    to an address, are treated as ours.

    Args:
        call: Validated call record
        internal_domains: Our own email domains
        known_names: Display name -> email for participants known so far
        resolver: Name resolver (default: AssigneeResolver())

    Returns:
        Action items in block order with ids "<call id>-ai-<n>"
    """
    if not call.action_items.strip():
        return []

    resolver = resolver or AssigneeResolver()
    items: list[ActionItem] = []
    assignee: str | None = None

    for raw_line in call.action_items.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        header = _parse_header(line)
        if header is not None:
            email, name = header
            if email is None and name:
                email = resolver.resolve(name, call.participants, known_names)
                if email is None:
                    logger.debug(
                        "unresolved action item assignee",
                        call_id=call.id,
                        assignee=name,
                    )
            assignee = email or name
            continue

        description, due_raw = _clean_item(line)
        if not description:
            continue

        owner = (
            ActionItemOwner.THEIRS
            if assignee and is_external_email(assignee, internal_domains)
            else ActionItemOwner.OURS
        )
        items.append(
            ActionItem(
                id=f"{call.id}-ai-{len(items)}",
                description=description,
                owner=owner,
                assignee=assignee,
                due_date=normalize_due_date(due_raw, call.date),
                created_date=call.date,
                status=ActionItemStatus.PENDING,
                source=call.title or None,
            )
        )

    logger.debug("parsed action items", call_id=call.id, count=len(items))
    return items
