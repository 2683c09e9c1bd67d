"""Tests for exception hierarchy."""

from remoasset_inbox.exceptions import (
    InboxClientError,
    GmailError,
    GmailAuthError,
    GmailFetchError,
    GmailHistoryExpiredError,
    LeadDirectoryError,
    NotificationError,
    ConfigError,
)


def test_all_inherit_from_base():
    for exc_class in [
        GmailError, GmailAuthError, GmailFetchError, GmailHistoryExpiredError,
        LeadDirectoryError,
        NotificationError,
        ConfigError,
    ]:
        assert issubclass(exc_class, InboxClientError)


def test_gmail_hierarchy():
    assert issubclass(GmailAuthError, GmailError)
    assert issubclass(GmailFetchError, GmailError)
    assert issubclass(GmailHistoryExpiredError, GmailFetchError)


def test_exception_message():
    e = GmailAuthError("test error")
    assert str(e) == "test error"
