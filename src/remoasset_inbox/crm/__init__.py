"""CRM-side collaborators: lead directory and notification storage."""

from remoasset_inbox.crm.models import (
    LeadRef,
    Notification,
    NotificationPreferences,
    UserContext,
)
from remoasset_inbox.crm.directory import BaseLeadDirectory, SqliteLeadDirectory
from remoasset_inbox.crm.notifications import (
    BaseNotificationSink,
    SqliteNotificationStore,
)

__all__ = [
    "LeadRef",
    "Notification",
    "NotificationPreferences",
    "UserContext",
    "BaseLeadDirectory",
    "SqliteLeadDirectory",
    "BaseNotificationSink",
    "SqliteNotificationStore",
]
