"""Abstract base class for mail provider clients."""

from __future__ import annotations

from abc import ABC, abstractmethod

from remoasset_inbox.gmail.models import (
    HistoryPage,
    MailProfile,
    MessageMetadata,
    ThreadMetadata,
    ThreadStub,
)


class BaseMailProvider(ABC):
    """Async interface the inbox consumes from a mail provider.

    Every call may fail independently; callers isolate failures per call.
    """

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether an authenticated session with the provider exists."""
        ...

    @abstractmethod
    async def alist_threads(self, email: str, limit: int) -> list[ThreadStub]:
        """Up to ``limit`` threads involving ``email``, most recent first."""
        ...

    @abstractmethod
    async def aget_thread_metadata(self, thread_id: str) -> ThreadMetadata:
        """Header-level messages of a thread, in chronological order."""
        ...

    async def aget_message_metadata(self, message_id: str) -> MessageMetadata:
        raise NotImplementedError

    async def aget_profile(self) -> MailProfile:
        raise NotImplementedError

    async def alist_history(self, start_history_id: str) -> HistoryPage:
        raise NotImplementedError
