"""Lead directory: which leads a user may see, and their contact emails."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path

from remoasset_inbox.crm.models import LeadRef, UserContext
from remoasset_inbox.exceptions import LeadDirectoryError

logger = logging.getLogger(__name__)

# ASCII whitespace trimmed from stored emails, matching str.strip()
EMAIL_WHITESPACE = " \t\n\r\x0b\x0c"

LEADS_SCHEMA = """
CREATE TABLE IF NOT EXISTS leads (
    id TEXT PRIMARY KEY,
    company_name TEXT NOT NULL,
    email TEXT,
    owner_id TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


class BaseLeadDirectory(ABC):
    """Abstract lead store queried by the inbox."""

    @abstractmethod
    async def visible_leads(self, user: UserContext, limit: int) -> list[LeadRef]:
        """Up to ``limit`` leads with a usable email that ``user`` may see.

        Admins see every lead; other users only the leads they own.
        """
        ...


class SqliteLeadDirectory(BaseLeadDirectory):
    """Lead directory backed by a SQLite ``leads`` table."""

    def __init__(self, db_path: Path):
        self.db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(str(self.db_path))
            conn.row_factory = sqlite3.Row
            return conn
        except (sqlite3.OperationalError, sqlite3.DatabaseError) as e:
            raise LeadDirectoryError(f"Failed to open lead database: {e}") from e

    def ensure_schema(self) -> None:
        conn = self._connect()
        try:
            conn.execute(LEADS_SCHEMA)
            conn.commit()
        finally:
            conn.close()

    def add_lead(
        self,
        lead_id: str,
        company_name: str,
        email: str | None = None,
        owner_id: str | None = None,
    ) -> LeadRef:
        """Insert or replace a lead row."""
        now = datetime.now(timezone.utc).isoformat()
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT OR REPLACE INTO leads
                    (id, company_name, email, owner_id, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (lead_id, company_name, email, owner_id, now, now),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise LeadDirectoryError(f"Failed to save lead {lead_id}: {e}") from e
        finally:
            conn.close()
        return LeadRef(id=lead_id, display_name=company_name, email=email, owner_id=owner_id)

    def fetch_visible_leads(self, user: UserContext, limit: int) -> list[LeadRef]:
        """Sync version of visible_leads."""
        sql = """
            SELECT id, company_name, email, owner_id
            FROM leads
            WHERE email IS NOT NULL AND TRIM(email, ?) != ''
        """
        params: list = [EMAIL_WHITESPACE]
        if not user.is_admin:
            sql += " AND owner_id = ?"
            params.append(user.user_id)
        sql += " ORDER BY rowid LIMIT ?"
        params.append(limit)

        conn = self._connect()
        try:
            rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise LeadDirectoryError(f"Failed to query leads: {e}") from e
        finally:
            conn.close()

        leads = [
            LeadRef(
                id=row["id"],
                display_name=row["company_name"],
                email=row["email"].strip(),
                owner_id=row["owner_id"],
            )
            for row in rows
        ]
        logger.debug(f"Lead directory returned {len(leads)} leads for {user.user_id}")
        return leads

    async def visible_leads(self, user: UserContext, limit: int) -> list[LeadRef]:
        return await asyncio.to_thread(self.fetch_visible_leads, user, limit)
