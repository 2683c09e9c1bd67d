"""Tests for the SQLite lead directory."""

import asyncio
import sqlite3

import pytest

from remoasset_inbox.crm.directory import SqliteLeadDirectory
from remoasset_inbox.crm.models import LeadRef, UserContext
from remoasset_inbox.exceptions import LeadDirectoryError


@pytest.fixture
def directory(tmp_path):
    d = SqliteLeadDirectory(tmp_path / "crm.db")
    d.ensure_schema()
    d.add_lead("l1", "Acme", "sales@acme.io", owner_id="u1")
    d.add_lead("l2", "Globex", "  info@globex.com  ", owner_id="u2")
    d.add_lead("l3", "Initech", None, owner_id="u1")
    d.add_lead("l4", "Umbrella", "   ", owner_id="u1")
    d.add_lead("l5", "Hooli", "hi@hooli.xyz", owner_id="u1")
    return d


def test_owner_sees_only_own_leads_with_email(directory):
    leads = directory.fetch_visible_leads(UserContext("u1"), limit=10)
    assert [lead.id for lead in leads] == ["l1", "l5"]


def test_admin_sees_all_leads_with_email(directory):
    leads = directory.fetch_visible_leads(UserContext("admin", is_admin=True), limit=10)
    assert [lead.id for lead in leads] == ["l1", "l2", "l5"]


def test_emails_are_stripped(directory):
    leads = directory.fetch_visible_leads(UserContext("u2"), limit=10)
    assert leads == [LeadRef("l2", "Globex", "info@globex.com", "u2")]


def test_limit(directory):
    leads = directory.fetch_visible_leads(UserContext("admin", is_admin=True), limit=2)
    assert len(leads) == 2


def test_control_whitespace_emails_do_not_use_limit(tmp_path):
    d = SqliteLeadDirectory(tmp_path / "crm.db")
    d.ensure_schema()
    d.add_lead("t1", "Tabs", "\t\t", owner_id="u1")
    d.add_lead("t2", "Newlines", "\n\r\n", owner_id="u1")
    d.add_lead("t3", "Mixed", " \x0b\x0c ", owner_id="u1")
    d.add_lead("ok", "Valid", "\tdeals@valid.io\n", owner_id="u1")

    leads = d.fetch_visible_leads(UserContext("u1"), limit=1)

    assert leads == [LeadRef("ok", "Valid", "deals@valid.io", "u1")]


def test_async_visible_leads(directory):
    leads = asyncio.run(directory.visible_leads(UserContext("u1"), 10))
    assert len(leads) == 2


def test_missing_table_raises(tmp_path):
    d = SqliteLeadDirectory(tmp_path / "empty.db")
    with pytest.raises(LeadDirectoryError, match="Failed to query leads"):
        d.fetch_visible_leads(UserContext("u1"), 10)


def test_lead_has_email():
    assert LeadRef("l", "X", "a@x.com").has_email
    assert not LeadRef("l", "X", " ").has_email
    assert not LeadRef("l", "X").has_email
