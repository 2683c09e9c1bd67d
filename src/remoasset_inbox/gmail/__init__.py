"""Gmail mail provider client.

Heavy imports are deferred. Use explicit imports:
    from remoasset_inbox.gmail.client import GmailClient
    from remoasset_inbox.gmail.auth import AuthManager
    etc.
"""

# Light imports only (no Google API deps)
from remoasset_inbox.gmail.label import Label
from remoasset_inbox.gmail import query
from remoasset_inbox.gmail import label
from remoasset_inbox.gmail.base import BaseMailProvider
from remoasset_inbox.gmail.models import (
    AddedMessage,
    HistoryPage,
    MailProfile,
    MessageMetadata,
    ThreadMetadata,
    ThreadStub,
)


def __getattr__(name):
    """Lazy imports for classes that require the Google client libraries."""
    if name == "GmailClient":
        from remoasset_inbox.gmail.client import GmailClient
        return GmailClient
    if name == "AuthManager":
        from remoasset_inbox.gmail.auth import AuthManager
        return AuthManager
    if name == "parse_thread_metadata":
        from remoasset_inbox.gmail.parser import parse_thread_metadata
        return parse_thread_metadata
    raise AttributeError(f"module 'remoasset_inbox.gmail' has no attribute {name!r}")


__all__ = [
    "GmailClient",
    "AuthManager",
    "BaseMailProvider",
    "Label",
    "query",
    "label",
    "parse_thread_metadata",
    "AddedMessage",
    "HistoryPage",
    "MailProfile",
    "MessageMetadata",
    "ThreadMetadata",
    "ThreadStub",
]
