"""Display-ready inbox thread summaries."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone

import dateutil.parser as parser

_EPOCH_MIN = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class ThreadSummary:
    """A thread attributed to the lead whose listing first surfaced it."""

    thread_id: str
    lead_id: str
    lead_name: str
    lead_email: str
    subject: str
    snippet: str
    date: str  # ISO-8601 of the most recent message
    unread: bool
    starred: bool
    message_count: int
    sender: str

    @property
    def sort_key(self) -> datetime:
        """Parsed ``date``; naive values are taken as UTC, unparseable sort last."""
        if not self.date:
            return _EPOCH_MIN
        try:
            dt = parser.isoparse(self.date)
        except (ValueError, OverflowError):
            return _EPOCH_MIN
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt

    def to_dict(self) -> dict:
        return asdict(self)


def sort_by_recency(summaries: list[ThreadSummary]) -> list[ThreadSummary]:
    """Newest first."""
    return sorted(summaries, key=lambda s: s.sort_key, reverse=True)
