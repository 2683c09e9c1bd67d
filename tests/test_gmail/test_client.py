"""Tests for the Gmail client."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest
from googleapiclient.errors import HttpError

from remoasset_inbox.exceptions import (
    GmailAuthError,
    GmailFetchError,
    GmailHistoryExpiredError,
)
from remoasset_inbox.gmail.client import GmailClient


def _http_error(status):
    resp = MagicMock()
    resp.status = status
    resp.reason = "error"
    return HttpError(resp, b"{}")


@pytest.fixture
def gmail_client():
    mock_service = MagicMock()
    creds = MagicMock()
    creds.valid = True
    with patch("googleapiclient.discovery.build", return_value=mock_service):
        client = GmailClient(creds)
    with patch.object(GmailClient, "_new_http", return_value=MagicMock()):
        yield client, mock_service


def test_not_connected_without_credentials():
    client = GmailClient(None)
    assert client.is_connected is False
    with pytest.raises(GmailAuthError, match="not connected"):
        client.list_threads("a@x.com")


def test_is_connected(gmail_client):
    client, _ = gmail_client
    assert client.is_connected is True


def test_list_threads_queries_contact(gmail_client):
    client, service = gmail_client
    service.users().threads().list().execute.return_value = {
        "threads": [{"id": "t1", "snippet": "hi"}, {"id": "t2"}],
    }
    stubs = client.list_threads("a@x.com", limit=6)
    assert [s.id for s in stubs] == ["t1", "t2"]
    service.users().threads().list.assert_called_with(
        userId="me", q="{from:a@x.com to:a@x.com}", maxResults=6,
    )


def test_get_thread_metadata(gmail_client):
    client, service = gmail_client
    service.users().threads().get().execute.return_value = {
        "id": "t1",
        "snippet": "hello",
        "messages": [
            {
                "id": "m1",
                "threadId": "t1",
                "labelIds": ["UNREAD"],
                "payload": {"headers": [{"name": "Subject", "value": "Quote"}]},
            }
        ],
    }
    thread = client.get_thread_metadata("t1")
    assert thread.id == "t1"
    assert thread.messages[0].subject == "Quote"
    assert thread.messages[0].unread is True


def test_unauthorized_maps_to_auth_error(gmail_client):
    client, service = gmail_client
    service.users().threads().get().execute.side_effect = _http_error(401)
    with pytest.raises(GmailAuthError, match="session expired"):
        client.get_thread_metadata("t1")


def test_other_errors_map_to_fetch_error(gmail_client):
    client, service = gmail_client
    service.users().threads().list().execute.side_effect = _http_error(500)
    with pytest.raises(GmailFetchError, match="Failed to list threads"):
        client.list_threads("a@x.com")


def test_list_history_follows_pages(gmail_client):
    client, service = gmail_client
    service.users().history().list().execute.side_effect = [
        {
            "historyId": "11",
            "nextPageToken": "p2",
            "history": [{"messagesAdded": [{"message": {"id": "m1", "threadId": "t1"}}]}],
        },
        {
            "historyId": "12",
            "history": [{"messagesAdded": [{"message": {"id": "m2", "threadId": "t2"}}]}],
        },
    ]
    page = client.list_history("10")
    assert page.history_id == "12"
    assert [a.id for a in page.added] == ["m1", "m2"]


def test_list_history_expired(gmail_client):
    client, service = gmail_client
    service.users().history().list().execute.side_effect = _http_error(404)
    with pytest.raises(GmailHistoryExpiredError):
        client.list_history("1")


def test_async_wrappers(gmail_client):
    client, service = gmail_client
    service.users().getProfile().execute.return_value = {
        "emailAddress": "me@x.com", "historyId": "42",
    }
    profile = asyncio.run(client.aget_profile())
    assert profile.history_id == "42"
