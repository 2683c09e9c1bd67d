"""Tests for Gmail query builder."""

import pytest

from remoasset_inbox.gmail.query import construct_query, contact_query


def test_simple_sender():
    q = construct_query(sender="alice@example.com")
    assert q == "from:alice@example.com"


def test_and_terms():
    q = construct_query(sender="alice@example.com", subject="Meeting")
    assert q == "(from:alice@example.com subject:Meeting)"


def test_or_senders():
    q = construct_query(sender=["alice@example.com", "bob@example.com"])
    assert q == "{from:alice@example.com from:bob@example.com}"


def test_exclude():
    q = construct_query(exclude_sender="spam@example.com")
    assert q == "-from:spam@example.com"


def test_newer_than():
    q = construct_query(newer_than=(5, "day"))
    assert q == "newer_than:5d"


def test_flags():
    assert construct_query(starred=True) == "is:starred"
    assert construct_query(unread=True) == "is:unread"


def test_labels():
    q = construct_query(labels=["Work", "Important"])
    assert q == "(label:Work label:Important)"


def test_or_of_dicts():
    q = construct_query({"sender": "a@x.com"}, {"recipient": "a@x.com"})
    assert q == "{from:a@x.com to:a@x.com}"


def test_contact_query_matches_both_directions():
    assert contact_query(" a@x.com ") == "{from:a@x.com to:a@x.com}"


def test_unknown_term():
    with pytest.raises(ValueError, match="Unknown query term"):
        construct_query(colour="red")
