"""Poll Gmail history for new lead replies and raise notifications."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Callable

from remoasset_inbox.config import InboxConfig
from remoasset_inbox.crm.directory import BaseLeadDirectory
from remoasset_inbox.crm.models import (
    LeadRef,
    Notification,
    NotificationPreferences,
    UserContext,
)
from remoasset_inbox.crm.notifications import BaseNotificationSink
from remoasset_inbox.exceptions import GmailHistoryExpiredError
from remoasset_inbox.gmail import label
from remoasset_inbox.gmail.base import BaseMailProvider
from remoasset_inbox.gmail.parser import parse_sender_email
from remoasset_inbox.inbox.aggregator import NO_SUBJECT, ThreadAggregator, settle_all

logger = logging.getLogger(__name__)


class HistoryCursorStore:
    """The Gmail history ID to resume polling from.

    Kept in memory; when ``path`` is given it is also written to a small
    JSON file so a restart does not replay or skip mail.
    """

    def __init__(self, path: Path | None = None):
        self.path = path
        self._history_id: str | None = None
        if path is not None and path.exists():
            try:
                self._history_id = json.loads(path.read_text()).get("history_id")
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Ignoring unreadable history cursor at {path}: {e}")

    def get(self) -> str | None:
        return self._history_id

    def set(self, history_id: str) -> None:
        self._history_id = history_id
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps({"history_id": history_id}))

    def clear(self) -> None:
        self._history_id = None
        if self.path is not None and self.path.exists():
            self.path.unlink()


class MailNotificationPoller:
    """Turns new INBOX mail from known leads into notifications.

    Each poll reads Gmail history since the stored cursor. The first poll
    only seeds the cursor, so mail that predates the poller never notifies.
    A lead match notifies the lead's owner (or the polling user for unowned
    leads) and triggers a refresh of the attached aggregator.

    Args:
        provider: Mail provider for the polling user's mailbox.
        directory: Lead store used to recognise senders.
        sink: Where notifications are stored.
        user: The polling user.
        cursor: History cursor storage.
        aggregator: Refreshed when a lead message arrives.
        preferences: Callable returning the user's current preferences.
        config: Poll intervals and bounds.
    """

    def __init__(
        self,
        provider: BaseMailProvider,
        directory: BaseLeadDirectory,
        sink: BaseNotificationSink,
        user: UserContext,
        cursor: HistoryCursorStore | None = None,
        aggregator: ThreadAggregator | None = None,
        preferences: Callable[[], NotificationPreferences] | None = None,
        config: InboxConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.provider = provider
        self.directory = directory
        self.sink = sink
        self.user = user
        self.cursor = cursor or HistoryCursorStore()
        self.aggregator = aggregator
        self.preferences = preferences or NotificationPreferences
        self.config = config or InboxConfig()
        self._clock = clock
        self._lead_map: dict[str, LeadRef] = {}
        self._lead_map_at: float | None = None

    async def refresh_leads(self, force: bool = False) -> dict[str, LeadRef]:
        """Rebuild the email -> lead map at most once per ``lead_cache_ttl``."""
        now = self._clock()
        if (
            not force
            and self._lead_map_at is not None
            and now - self._lead_map_at < self.config.lead_cache_ttl
        ):
            return self._lead_map
        self._lead_map_at = now

        leads = await self.directory.visible_leads(self.user, self.config.poller_max_leads)
        self._lead_map = {
            lead.email.strip().lower(): lead for lead in leads if lead.has_email
        }
        return self._lead_map

    async def poll_once(self) -> list[Notification]:
        """One history check. Returns the notifications it created."""
        if not self.provider.is_connected:
            return []

        prefs = self.preferences()
        lead_map = await self.refresh_leads()

        history_id = self.cursor.get()
        if not history_id:
            profile = await self.provider.aget_profile()
            if profile.history_id:
                self.cursor.set(profile.history_id)
                logger.info(f"Seeded mail history cursor at {profile.history_id}")
            return []

        try:
            page = await self.provider.alist_history(history_id)
        except GmailHistoryExpiredError:
            logger.warning("Mail history cursor expired, reseeding on next poll")
            self.cursor.clear()
            return []

        if page.history_id:
            self.cursor.set(page.history_id)

        inbox_messages: dict[str, str] = {}
        for added in page.added:
            if label.INBOX in added.label_ids:
                inbox_messages.setdefault(added.id, added.thread_id)
        if not inbox_messages:
            return []

        message_ids = list(inbox_messages)[:self.config.max_notified_messages]
        outcomes = await settle_all(
            self.provider.aget_message_metadata(message_id) for message_id in message_ids
        )

        created: list[Notification] = []
        lead_mail = False
        for message_id, outcome in zip(message_ids, outcomes):
            if not outcome.ok:
                logger.warning(f"Could not fetch message {message_id}: {outcome.error}")
                continue
            msg = outcome.value
            lead = lead_map.get(parse_sender_email(msg.sender))
            if lead is None:
                continue
            lead_mail = True

            if not prefs.email_reply:
                continue
            notification = Notification(
                user_id=lead.owner_id or self.user.user_id,
                title=f"New email from {lead.display_name}",
                message=f'"{msg.subject or NO_SUBJECT}"',
                type="email",
                metadata={
                    "thread_id": inbox_messages.get(message_id) or msg.thread_id,
                    "lead_id": lead.id,
                    "message_id": message_id,
                },
            )
            created.append(await self.sink.add(notification))

        if created:
            logger.info(f"Created {len(created)} lead mail notifications")
        if lead_mail and self.aggregator is not None:
            await self.aggregator.refresh()
        return created

    async def run(self, stop_event: asyncio.Event) -> None:
        """Poll until ``stop_event`` is set; transient errors are logged and skipped."""
        delay = self.config.initial_poll_delay
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=delay)
                break
            except asyncio.TimeoutError:
                pass
            try:
                await self.poll_once()
            except Exception as e:
                logger.warning(f"Mail poll failed: {e}")
            delay = self.config.poll_interval
