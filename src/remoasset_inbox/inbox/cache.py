"""Session-lifetime cache of the last successful inbox aggregation."""

from __future__ import annotations

import threading

from remoasset_inbox.inbox.models import ThreadSummary


class SessionCache:
    """Holds one user's last successful result at a time.

    ``get`` for any user other than the one passed to the latest ``set``
    is a miss, so switching users invalidates the cache implicitly.
    Nothing is persisted beyond the process.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._user_id: str | None = None
        self._results: tuple[ThreadSummary, ...] = ()

    def get(self, user_id: str) -> list[ThreadSummary]:
        with self._lock:
            if user_id != self._user_id:
                return []
            return list(self._results)

    def set(self, user_id: str, results: list[ThreadSummary]) -> None:
        with self._lock:
            self._user_id = user_id
            self._results = tuple(results)

    def clear(self) -> None:
        with self._lock:
            self._user_id = None
            self._results = ()
