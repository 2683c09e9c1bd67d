"""Notification storage for "new email from lead" alerts."""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path

from remoasset_inbox.crm.models import Notification
from remoasset_inbox.exceptions import NotificationError

logger = logging.getLogger(__name__)

NOTIFICATIONS_SCHEMA = """
CREATE TABLE IF NOT EXISTS notifications (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    title TEXT NOT NULL,
    message TEXT NOT NULL,
    type TEXT NOT NULL DEFAULT 'info',
    metadata TEXT NOT NULL DEFAULT '{}',
    is_read INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL
)
"""


class BaseNotificationSink(ABC):
    """Where the mail poller delivers notifications."""

    @abstractmethod
    async def add(self, notification: Notification) -> Notification:
        """Persist a notification, returning it with its assigned id."""
        ...


class SqliteNotificationStore(BaseNotificationSink):
    """Notifications table in SQLite; metadata is stored as JSON."""

    def __init__(self, db_path: Path):
        self.db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(str(self.db_path))
            conn.row_factory = sqlite3.Row
            return conn
        except (sqlite3.OperationalError, sqlite3.DatabaseError) as e:
            raise NotificationError(f"Failed to open notification database: {e}") from e

    def ensure_schema(self) -> None:
        conn = self._connect()
        try:
            conn.execute(NOTIFICATIONS_SCHEMA)
            conn.commit()
        finally:
            conn.close()

    def insert(self, notification: Notification) -> Notification:
        """Sync version of add."""
        created_at = notification.created_at or datetime.now(timezone.utc).isoformat()
        conn = self._connect()
        try:
            cursor = conn.execute(
                """
                INSERT INTO notifications
                    (user_id, title, message, type, metadata, is_read, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    notification.user_id,
                    notification.title,
                    notification.message,
                    notification.type,
                    json.dumps(notification.metadata),
                    int(notification.is_read),
                    created_at,
                ),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise NotificationError(f"Failed to insert notification: {e}") from e
        finally:
            conn.close()

        notification.id = cursor.lastrowid
        notification.created_at = created_at
        return notification

    async def add(self, notification: Notification) -> Notification:
        return await asyncio.to_thread(self.insert, notification)

    def list_for_user(self, user_id: str, unread_only: bool = False) -> list[Notification]:
        """Newest first."""
        sql = "SELECT * FROM notifications WHERE user_id = ?"
        if unread_only:
            sql += " AND is_read = 0"
        sql += " ORDER BY created_at DESC, id DESC"

        conn = self._connect()
        try:
            rows = conn.execute(sql, (user_id,)).fetchall()
        except sqlite3.Error as e:
            raise NotificationError(f"Failed to read notifications: {e}") from e
        finally:
            conn.close()

        return [self._row_to_notification(row) for row in rows]

    def mark_read(self, notification_id: int) -> bool:
        """Returns True if a row was updated."""
        conn = self._connect()
        try:
            cursor = conn.execute(
                "UPDATE notifications SET is_read = 1 WHERE id = ?",
                (notification_id,),
            )
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as e:
            raise NotificationError(f"Failed to update notification: {e}") from e
        finally:
            conn.close()

    @staticmethod
    def _row_to_notification(row: sqlite3.Row) -> Notification:
        try:
            metadata = json.loads(row["metadata"] or "{}")
        except json.JSONDecodeError:
            logger.warning(f"Corrupt metadata on notification {row['id']}")
            metadata = {}
        return Notification(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            message=row["message"],
            type=row["type"],
            metadata=metadata,
            is_read=bool(row["is_read"]),
            created_at=row["created_at"],
        )
