"""Gmail API client for thread listing, metadata and history, sync and async."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from remoasset_inbox.exceptions import (
    GmailAuthError,
    GmailFetchError,
    GmailHistoryExpiredError,
)
from remoasset_inbox.gmail import label
from remoasset_inbox.gmail.base import BaseMailProvider
from remoasset_inbox.gmail.models import (
    HistoryPage,
    MailProfile,
    MessageMetadata,
    ThreadMetadata,
    ThreadStub,
)
from remoasset_inbox.gmail.parser import (
    METADATA_HEADERS,
    parse_history,
    parse_message_metadata,
    parse_profile,
    parse_thread_metadata,
    parse_thread_stubs,
)
from remoasset_inbox.gmail.query import contact_query

logger = logging.getLogger(__name__)


class GmailClient(BaseMailProvider):
    """Gmail API client with sync methods and ``asyncio.to_thread`` wrappers.

    The async wrappers may run concurrently, so every request is executed on
    its own authorized ``httplib2.Http`` rather than the service's shared one.

    Args:
        credentials: A google.oauth2.credentials.Credentials object, or None
            when the user has not connected Gmail yet.
        user_id: Gmail user id, ``"me"`` for the authenticated account.
    """

    def __init__(self, credentials, user_id: str = "me"):
        self._credentials = credentials
        self.user_id = user_id
        self._service = None
        if credentials is not None:
            try:
                from googleapiclient.discovery import build
            except ImportError:
                raise ImportError(
                    "google-api-python-client is required for GmailClient. "
                    "Install with: pip install remoasset-inbox"
                )
            self._service = build(
                "gmail", "v1", credentials=credentials, cache_discovery=False,
            )

    @classmethod
    def for_user(cls, auth_manager, user_id: str) -> GmailClient:
        """Client for a CRM user; disconnected when they have no usable token."""
        if not auth_manager.has_token(user_id):
            return cls(None)
        try:
            creds = auth_manager.get_credentials(user_id)
        except GmailAuthError as e:
            logger.warning(f"Gmail credentials unusable for {user_id}: {e}")
            return cls(None)
        return cls(creds)

    @property
    def is_connected(self) -> bool:
        creds = self._credentials
        if creds is None or self._service is None:
            return False
        return bool(creds.valid or (creds.expired and creds.refresh_token))

    @property
    def service(self):
        if self._service is None:
            raise GmailAuthError("Gmail not connected. Please connect in Settings.")
        return self._service

    def _new_http(self):
        import httplib2
        from google_auth_httplib2 import AuthorizedHttp

        return AuthorizedHttp(self._credentials, http=httplib2.Http())

    def _execute(self, request, action: str) -> dict:
        from googleapiclient.errors import HttpError

        try:
            return request.execute(http=self._new_http())
        except HttpError as e:
            if e.resp.status == 401:
                raise GmailAuthError(
                    "Gmail session expired. Please reconnect."
                ) from e
            raise GmailFetchError(f"Failed to {action}: {e}") from e
        except Exception as e:
            raise GmailFetchError(f"Failed to {action}: {e}") from e

    # ---- Sync methods ----

    def list_threads(self, email: str, limit: int = 20) -> list[ThreadStub]:
        """List up to ``limit`` threads sent by or addressed to ``email``."""
        request = self.service.users().threads().list(
            userId=self.user_id,
            q=contact_query(email),
            maxResults=limit,
        )
        response = self._execute(request, f"list threads for {email}")
        return parse_thread_stubs(response)[:limit]

    def get_thread_metadata(self, thread_id: str) -> ThreadMetadata:
        request = self.service.users().threads().get(
            userId=self.user_id,
            id=thread_id,
            format="metadata",
            metadataHeaders=METADATA_HEADERS,
        )
        response = self._execute(request, f"get thread {thread_id}")
        return parse_thread_metadata(response)

    def get_message_metadata(self, message_id: str) -> MessageMetadata:
        request = self.service.users().messages().get(
            userId=self.user_id,
            id=message_id,
            format="metadata",
            metadataHeaders=METADATA_HEADERS,
        )
        response = self._execute(request, f"get message {message_id}")
        return parse_message_metadata(response)

    def get_profile(self) -> MailProfile:
        """Address and current history ID of the connected mailbox."""
        request = self.service.users().getProfile(userId=self.user_id)
        return parse_profile(self._execute(request, "get profile"))

    def list_history(
        self,
        start_history_id: str,
        label_id: str | None = label.INBOX.id,
        max_pages: int = 5,
    ) -> HistoryPage:
        """Messages added since ``start_history_id``.

        Raises:
            GmailHistoryExpiredError: The cursor is too old or malformed
                (HTTP 404/400); the caller should reseed from ``get_profile``.
        """
        from googleapiclient.errors import HttpError

        kwargs: dict[str, Any] = {
            "userId": self.user_id,
            "startHistoryId": start_history_id,
            "historyTypes": ["messageAdded"],
        }
        if label_id:
            kwargs["labelId"] = label_id

        page = HistoryPage(history_id=start_history_id)
        for _ in range(max_pages):
            request = self.service.users().history().list(**kwargs)
            try:
                response = request.execute(http=self._new_http())
            except HttpError as e:
                if e.resp.status in (400, 404):
                    logger.warning(
                        f"History ID {start_history_id} is no longer valid, reseed required"
                    )
                    raise GmailHistoryExpiredError(
                        f"History ID {start_history_id} expired: {e}"
                    ) from e
                if e.resp.status == 401:
                    raise GmailAuthError("Gmail session expired. Please reconnect.") from e
                raise GmailFetchError(f"Failed to list history: {e}") from e
            except Exception as e:
                raise GmailFetchError(f"Failed to list history: {e}") from e

            chunk = parse_history(response)
            page.added.extend(chunk.added)
            if chunk.history_id:
                page.history_id = chunk.history_id

            page_token = response.get("nextPageToken")
            if not page_token:
                break
            kwargs["pageToken"] = page_token

        return page

    # ---- Async wrappers (asyncio.to_thread) ----

    async def alist_threads(self, email: str, limit: int = 20) -> list[ThreadStub]:
        """Async version of list_threads."""
        return await asyncio.to_thread(self.list_threads, email, limit)

    async def aget_thread_metadata(self, thread_id: str) -> ThreadMetadata:
        """Async version of get_thread_metadata."""
        return await asyncio.to_thread(self.get_thread_metadata, thread_id)

    async def aget_message_metadata(self, message_id: str) -> MessageMetadata:
        """Async version of get_message_metadata."""
        return await asyncio.to_thread(self.get_message_metadata, message_id)

    async def aget_profile(self) -> MailProfile:
        """Async version of get_profile."""
        return await asyncio.to_thread(self.get_profile)

    async def alist_history(self, start_history_id: str) -> HistoryPage:
        """Async version of list_history."""
        return await asyncio.to_thread(self.list_history, start_history_id)
