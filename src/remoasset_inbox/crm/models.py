"""Data models for the CRM lead directory and notifications."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class UserContext:
    """The authenticated CRM user a request runs on behalf of."""

    user_id: str
    is_admin: bool = False


@dataclass(frozen=True)
class LeadRef:
    """Minimal projection of a lead, enough to drive mail queries."""

    id: str
    display_name: str
    email: str | None = None
    owner_id: str | None = None

    @property
    def has_email(self) -> bool:
        return bool(self.email and self.email.strip())


@dataclass
class Notification:
    """An in-app notification addressed to a CRM user."""

    user_id: str
    title: str
    message: str
    type: str = "email"
    metadata: dict = field(default_factory=dict)
    id: int | None = None
    is_read: bool = False
    created_at: str = ""


@dataclass
class NotificationPreferences:
    """Per-user notification switches."""

    email_reply: bool = True
