"""Tests for applying IRC events to the membership store."""

from __future__ import annotations

import pytest

from autovoice.engine.events import apply_event, has_special_role
from autovoice.engine.store import MembershipStore
from autovoice.irc.base import Join, MalformedEventError, Names, Other, Part


def test_join_records_member():
    store = MembershipStore()
    apply_event(store, Join("alice", "#mod"), 5.0)
    assert store.get("alice") == 5.0


def test_part_removes_member():
    store = MembershipStore()
    apply_event(store, Join("alice", "#mod"), 5.0)
    apply_event(store, Part("alice", "#mod"), 6.0)
    assert "alice" not in store


def test_part_unknown_member_is_noop():
    store = MembershipStore()
    apply_event(store, Part("ghost", "#mod"), 1.0)
    assert len(store) == 0


def test_last_event_per_nickname_wins():
    store = MembershipStore()
    events = [
        Join("alice", "#mod"),
        Join("bob", "#mod"),
        Part("alice", "#mod"),
        Join("carol", "#mod"),
        Part("bob", "#mod"),
        Join("alice", "#mod"),
        Part("carol", "#mod"),
        Part("carol", "#mod"),
    ]
    for i, event in enumerate(events):
        apply_event(store, event, float(i))
    assert [name for name, _ in store.snapshot()] == ["alice"]


def test_names_skips_privileged_members():
    store = MembershipStore()
    apply_event(store, Names("#mod", "@admin user1 user2"), 7.0)
    assert store.snapshot() == [("user1", 7.0), ("user2", 7.0)]


@pytest.mark.parametrize("name", ["@op", "+voiced", "~owner", "&admin", "%halfop"])
def test_names_all_role_prefixes(name):
    store = MembershipStore()
    apply_event(store, Names("#mod", f"{name} plain"), 1.0)
    assert name not in store
    assert name[1:] not in store
    assert "plain" in store


def test_names_resets_existing_timestamp():
    store = MembershipStore()
    apply_event(store, Join("alice", "#mod"), 1.0)
    apply_event(store, Names("#mod", "alice"), 50.0)
    assert store.get("alice") == 50.0


def test_names_ignores_empty_tokens():
    store = MembershipStore()
    apply_event(store, Names("#mod", "alice  bob "), 1.0)
    assert sorted(name for name, _ in store.snapshot()) == ["alice", "bob"]


@pytest.mark.parametrize("event", [Names(None, "alice"), Names("#mod", None)])
def test_malformed_names_raises(event):
    store = MembershipStore()
    with pytest.raises(MalformedEventError):
        apply_event(store, event, 1.0)
    assert len(store) == 0


def test_other_events_ignored():
    store = MembershipStore()
    apply_event(store, Other("PRIVMSG", ("#mod", "hello")), 1.0)
    apply_event(store, Other("005", ("bot", "PREFIX=(ov)@+")), 1.0)
    assert len(store) == 0


def test_has_special_role():
    assert has_special_role("@op")
    assert not has_special_role("user@")
    assert not has_special_role("")
