"""Per-user OAuth2 token management for Gmail access."""

from __future__ import annotations

import logging
from pathlib import Path

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from remoasset_inbox.exceptions import GmailAuthError

logger = logging.getLogger(__name__)

DEFAULT_SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
]


class AuthManager:
    """Manages Gmail OAuth2 credentials for CRM users, one token file each.

    A user is "connected" when a token file exists for them; disconnecting
    removes it.

    Args:
        credentials_dir: Directory for storing token files.
        client_secret_file: Path to the client secrets JSON.
        scopes: OAuth2 scopes to request.
    """

    def __init__(
        self,
        credentials_dir: Path,
        client_secret_file: Path,
        scopes: list[str] | None = None,
    ):
        self.scopes = scopes or list(DEFAULT_SCOPES)
        self._credentials_dir = credentials_dir
        self._client_secret = client_secret_file

    def _token_path(self, user_id: str) -> Path:
        return self._credentials_dir / f"token_{user_id}.json"

    def authorize_user(self, user_id: str) -> Credentials:
        """Run the interactive OAuth2 flow for a user. Opens a browser."""
        if not self._client_secret.exists():
            raise GmailAuthError(
                f"Client secret not found at {self._client_secret}. "
                "Download it from Google Cloud Console and place it there."
            )

        flow = InstalledAppFlow.from_client_secrets_file(
            str(self._client_secret), self.scopes,
        )
        creds = flow.run_local_server(port=0)
        self._save(user_id, creds)
        logger.info(f"Authorized Gmail for user {user_id}")
        return creds

    def get_credentials(self, user_id: str) -> Credentials:
        """Load and auto-refresh credentials for a connected user."""
        token_path = self._token_path(user_id)
        if not token_path.exists():
            raise GmailAuthError(
                f"Gmail not connected for user '{user_id}'. "
                "Connect it in Settings first."
            )

        creds = Credentials.from_authorized_user_file(str(token_path), self.scopes)

        if creds.expired and creds.refresh_token:
            try:
                creds.refresh(Request())
            except RefreshError as e:
                raise GmailAuthError(
                    f"Gmail session expired for user '{user_id}'. Please reconnect."
                ) from e
            self._save(user_id, creds)

        if not creds.valid:
            raise GmailAuthError(
                f"Token for user '{user_id}' is invalid. Please reconnect."
            )

        return creds

    def _save(self, user_id: str, creds: Credentials) -> None:
        token_path = self._token_path(user_id)
        token_path.parent.mkdir(parents=True, exist_ok=True)
        token_path.write_text(creds.to_json())

    def remove_token(self, user_id: str) -> bool:
        """Disconnect a user by deleting their token. Returns True if deleted."""
        token_path = self._token_path(user_id)
        if token_path.exists():
            token_path.unlink()
            return True
        return False

    def has_token(self, user_id: str) -> bool:
        return self._token_path(user_id).exists()
