"""Data models for the Gmail module."""

from __future__ import annotations

from dataclasses import dataclass, field

from remoasset_inbox.gmail import label


@dataclass
class ThreadStub:
    """A thread reference as returned by ``threads.list``."""

    id: str
    snippet: str = ""


@dataclass
class MessageMetadata:
    """Header-level view of a single Gmail message (format=metadata)."""

    id: str
    thread_id: str
    subject: str
    sender: str
    to: str
    date: str  # ISO-8601, "" when unknown
    snippet: str
    label_ids: list[str] = field(default_factory=list)

    @property
    def unread(self) -> bool:
        return label.UNREAD in self.label_ids

    @property
    def starred(self) -> bool:
        return label.STARRED in self.label_ids


@dataclass
class ThreadMetadata:
    """A thread and its messages in chronological order."""

    id: str
    snippet: str
    messages: list[MessageMetadata] = field(default_factory=list)
    history_id: str | None = None


@dataclass
class AddedMessage:
    """A message reported by the History API as newly added."""

    id: str
    thread_id: str
    label_ids: list[str] = field(default_factory=list)


@dataclass
class HistoryPage:
    """Changes since a history cursor, plus the cursor to resume from."""

    history_id: str | None
    added: list[AddedMessage] = field(default_factory=list)


@dataclass
class MailProfile:
    email_address: str
    history_id: str | None
