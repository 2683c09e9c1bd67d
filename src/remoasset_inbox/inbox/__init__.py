"""Lead inbox: thread aggregation, session cache and new-mail polling."""

from remoasset_inbox.inbox.models import ThreadSummary
from remoasset_inbox.inbox.cache import SessionCache
from remoasset_inbox.inbox.aggregator import ThreadAggregator
from remoasset_inbox.inbox.poller import HistoryCursorStore, MailNotificationPoller

__all__ = [
    "ThreadSummary",
    "SessionCache",
    "ThreadAggregator",
    "HistoryCursorStore",
    "MailNotificationPoller",
]
