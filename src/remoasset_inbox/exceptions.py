"""Unified exception hierarchy for remoasset-inbox."""


class InboxClientError(Exception):
    """Base exception for all remoasset-inbox errors."""


# Gmail
class GmailError(InboxClientError):
    """Base exception for Gmail operations."""


class GmailAuthError(GmailError):
    """Gmail authentication or authorization failure."""


class GmailFetchError(GmailError):
    """Failed to fetch Gmail threads, messages or profile data."""


class GmailHistoryExpiredError(GmailFetchError):
    """The stored history ID is too old or invalid; a reseed is required."""


# CRM
class LeadDirectoryError(InboxClientError):
    """Failed to query the lead directory."""


class NotificationError(InboxClientError):
    """Failed to store or read notifications."""


# Config
class ConfigError(InboxClientError):
    """Invalid configuration value."""
