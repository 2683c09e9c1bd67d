"""Parse Gmail API thread/message payloads into structured data."""

from __future__ import annotations

import html as html_module
import re
from datetime import datetime, timezone
from email.utils import parseaddr

import dateutil.parser as parser

from remoasset_inbox.gmail.models import (
    AddedMessage,
    HistoryPage,
    MailProfile,
    MessageMetadata,
    ThreadMetadata,
    ThreadStub,
)

METADATA_HEADERS = ["From", "To", "Subject", "Date"]

_BRACKETED_ADDRESS = re.compile(r"<([^>]+)>")
_BARE_ADDRESS = re.compile(r"(\S+@\S+)")


def parse_message_metadata(raw_message: dict) -> MessageMetadata:
    """Extract header-level data from a Gmail message payload.

    Pure parsing, no network calls. Accepts messages fetched with
    ``format=metadata`` or ``format=full``.
    """
    headers = _extract_headers(raw_message.get("payload", {}))
    return MessageMetadata(
        id=raw_message["id"],
        thread_id=raw_message.get("threadId", ""),
        subject=headers.get("subject", ""),
        sender=headers.get("from", ""),
        to=headers.get("to", ""),
        date=_normalize_date(headers.get("date", ""), raw_message.get("internalDate")),
        snippet=html_module.unescape(raw_message.get("snippet", "")),
        label_ids=list(raw_message.get("labelIds", [])),
    )


def parse_thread_metadata(raw_thread: dict) -> ThreadMetadata:
    """Parse a ``threads.get`` response; messages keep the API's chronological order."""
    return ThreadMetadata(
        id=raw_thread["id"],
        snippet=html_module.unescape(raw_thread.get("snippet", "")),
        messages=[parse_message_metadata(m) for m in raw_thread.get("messages", [])],
        history_id=raw_thread.get("historyId"),
    )


def parse_thread_stubs(response: dict) -> list[ThreadStub]:
    return [
        ThreadStub(id=t["id"], snippet=html_module.unescape(t.get("snippet", "")))
        for t in response.get("threads", [])
    ]


def parse_history(response: dict) -> HistoryPage:
    """Flatten a ``history.list`` response into the messages it added."""
    added = []
    for record in response.get("history", []):
        for item in record.get("messagesAdded", []):
            msg = item.get("message", {})
            if "id" not in msg:
                continue
            added.append(
                AddedMessage(
                    id=msg["id"],
                    thread_id=msg.get("threadId", ""),
                    label_ids=list(msg.get("labelIds", [])),
                )
            )
    return HistoryPage(history_id=response.get("historyId"), added=added)


def parse_profile(response: dict) -> MailProfile:
    return MailProfile(
        email_address=response.get("emailAddress", ""),
        history_id=response.get("historyId"),
    )


def parse_sender_email(from_header: str) -> str:
    """Return the bare, lower-cased address from a ``From`` header.

    Handles ``"Name <addr>"`` and plain ``addr`` forms.
    """
    _, addr = parseaddr(from_header)
    if not addr or "@" not in addr:
        match = _BRACKETED_ADDRESS.search(from_header) or _BARE_ADDRESS.search(from_header)
        addr = match.group(1) if match else from_header
    return addr.strip().lower()


def _extract_headers(payload: dict) -> dict[str, str]:
    return {
        h["name"].lower(): h["value"]
        for h in payload.get("headers", [])
    }


def _normalize_date(date_header: str, internal_date: str | None) -> str:
    """Convert an RFC 2822 ``Date`` header to ISO-8601.

    Falls back to ``internalDate`` (epoch milliseconds) when the header is
    missing or unparseable, and to ``""`` when neither is usable.
    """
    if date_header:
        try:
            return parser.parse(date_header).isoformat()
        except (ValueError, OverflowError):
            pass
    if internal_date:
        try:
            ts = int(internal_date) / 1000
            return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()
        except (ValueError, OverflowError, OSError):
            pass
    return ""
