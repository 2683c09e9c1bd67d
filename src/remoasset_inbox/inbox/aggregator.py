"""Lead inbox aggregation: merge every visible lead's Gmail threads into one list.

A refresh cycle runs in strict phases:

    leads -> per-lead thread listings -> merge/dedupe -> metadata batches -> sort

Listings and each metadata batch fan out concurrently with settle-all
semantics: one lead or thread failing never aborts its siblings. Outcomes are
stored at their request index, so attribution does not depend on completion
order.

The displayed list is replaced only by a complete, non-empty result. Total
listing failure, an empty merge or an unexpected exception all leave the
previous list in place.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Iterable

from remoasset_inbox.config import InboxConfig
from remoasset_inbox.crm.directory import BaseLeadDirectory
from remoasset_inbox.crm.models import LeadRef, UserContext
from remoasset_inbox.gmail.base import BaseMailProvider
from remoasset_inbox.gmail.models import ThreadMetadata
from remoasset_inbox.inbox.cache import SessionCache
from remoasset_inbox.inbox.models import ThreadSummary, sort_by_recency

logger = logging.getLogger(__name__)

NO_SUBJECT = "(No subject)"
CONNECTIVITY_ERROR = "Could not load emails from Gmail. Check your connection and try again."
DEFAULT_ERROR = "Failed to load inbox"


@dataclass
class Settled:
    """Outcome of one request in a settle-all fan-out."""

    value: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def settle_all(calls: Iterable[Awaitable]) -> list[Settled]:
    """Await all calls concurrently; each outcome lands at its call's index."""
    pending = list(calls)
    slots: list[Settled] = [Settled() for _ in pending]

    async def _run(index: int, call: Awaitable) -> None:
        try:
            slots[index] = Settled(value=await call)
        except Exception as e:
            slots[index] = Settled(error=e)

    await asyncio.gather(*(_run(i, call) for i, call in enumerate(pending)))
    return slots


def summarize_thread(thread_id: str, lead: LeadRef, thread: ThreadMetadata) -> ThreadSummary | None:
    """Project a fetched thread onto its lead. Threads without messages yield None."""
    messages = thread.messages
    if not messages:
        return None
    first, last = messages[0], messages[-1]
    return ThreadSummary(
        thread_id=thread_id,
        lead_id=lead.id,
        lead_name=lead.display_name,
        lead_email=(lead.email or "").strip(),
        subject=first.subject or NO_SUBJECT,
        snippet=last.snippet or thread.snippet or "",
        date=last.date,
        unread=any(m.unread for m in messages),
        starred=any(m.starred for m in messages),
        message_count=len(messages),
        sender=last.sender,
    )


class ThreadAggregator:
    """Keeps a deduplicated, recency-sorted thread list for the current user's leads.

    Args:
        directory: Lead store consulted at the start of each cycle.
        provider: Mail provider; ``is_connected`` is a precondition.
        cache: Session cache shared across aggregator instances so a fresh
            instance (e.g. after navigation) starts from the last result.
        config: Request bounds, see ``InboxConfig``.
        user: The authenticated user, or None when signed out.
    """

    def __init__(
        self,
        directory: BaseLeadDirectory,
        provider: BaseMailProvider,
        cache: SessionCache | None = None,
        config: InboxConfig | None = None,
        user: UserContext | None = None,
    ):
        self.directory = directory
        self.provider = provider
        self.cache = cache if cache is not None else SessionCache()
        self.config = config or InboxConfig()
        self.user = user

        self._threads: tuple[ThreadSummary, ...] = ()
        self._leads: tuple[LeadRef, ...] = ()
        self.error: str | None = None
        self.loading = False
        self.initial_fetch_done = False
        self._in_flight = False

        if user is not None:
            self._threads = tuple(self.cache.get(user.user_id))

    @property
    def threads(self) -> list[ThreadSummary]:
        return list(self._threads)

    @property
    def leads(self) -> list[LeadRef]:
        return list(self._leads)

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def switch_user(self, user: UserContext | None) -> None:
        """Show ``user``'s cached threads, or nothing on a cache miss."""
        if user == self.user:
            return
        self.user = user
        self._leads = ()
        self.error = None
        self._threads = tuple(self.cache.get(user.user_id)) if user else ()

    async def refresh(self) -> bool:
        """Run one aggregation cycle.

        Returns False without doing anything when no user is signed in, the
        provider is not connected, or a cycle is already running.
        """
        user = self.user
        if user is None or not self.provider.is_connected:
            return False
        if self._in_flight:
            logger.debug("Inbox refresh already in flight, dropping request")
            return False

        self._in_flight = True
        self.loading = True
        try:
            await self._run_cycle(user)
        except Exception as e:
            logger.error(f"Inbox refresh failed for {user.user_id}: {e}")
            if self.user == user:
                self.error = str(e) or DEFAULT_ERROR
        finally:
            self._in_flight = False
            self.loading = False
            self.initial_fetch_done = True
        return True

    async def _run_cycle(self, user: UserContext) -> None:
        cfg = self.config

        leads = [
            lead for lead in await self.directory.visible_leads(user, cfg.max_leads)
            if lead.has_email
        ]
        if self.user == user:
            self._leads = tuple(leads)

        if not leads:
            logger.info(f"No leads with email for {user.user_id}")
            self._settle(user, [], error=None)
            return

        listings = await settle_all(
            self.provider.alist_threads(lead.email.strip(), cfg.threads_per_lead)
            for lead in leads
        )

        if not any(outcome.ok for outcome in listings):
            logger.error(
                f"All {len(leads)} thread listings failed for {user.user_id}: "
                f"{listings[0].error}"
            )
            self._settle(user, [], error=CONNECTIVITY_ERROR)
            return

        attribution: dict[str, LeadRef] = {}
        for lead, outcome in zip(leads, listings):
            if not outcome.ok:
                logger.warning(f"Skipping lead {lead.id}: {outcome.error}")
                continue
            for stub in outcome.value:
                attribution.setdefault(stub.id, lead)

        selected = list(attribution)[:cfg.max_merged_threads]
        results: list[ThreadSummary] = []

        batch_size = cfg.metadata_batch_size
        for start in range(0, len(selected), batch_size):
            batch = selected[start:start + batch_size]
            outcomes = await settle_all(
                self.provider.aget_thread_metadata(thread_id) for thread_id in batch
            )
            for thread_id, outcome in zip(batch, outcomes):
                if not outcome.ok:
                    logger.warning(f"Skipping thread {thread_id}: {outcome.error}")
                    continue
                summary = summarize_thread(thread_id, attribution[thread_id], outcome.value)
                if summary is not None:
                    results.append(summary)

        logger.info(
            f"Inbox refresh for {user.user_id}: {len(leads)} leads, "
            f"{len(attribution)} threads merged, {len(results)} summarized"
        )
        self._settle(user, sort_by_recency(results), error=None)

    def _settle(self, user: UserContext, results: list[ThreadSummary], error: str | None) -> None:
        """Publish a cycle's outcome; an empty result never replaces a non-empty one.

        A cycle that finishes after the user switched is discarded, leaving
        the active user's cache slot intact.
        """
        if self.user != user:
            return
        if results:
            self.cache.set(user.user_id, results)
            self._threads = tuple(results)
        self.error = error
