"""Tests for the typing indicator lifecycle."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import select

from app.core.errors import NotFoundError
from app.core.timeutils import as_utc, utcnow
from app.models import TypingIndicator
from app.services import TypingLocation, get_typing_indicators, start_typing, stop_typing
from app.services import typing_indicators as typing_service


@pytest.fixture()
def alice(make_user):
    return make_user("Alice")


@pytest.fixture()
def bob(make_user):
    return make_user("Bob")


def stored_indicators(db_session) -> list[TypingIndicator]:
    db_session.expire_all()
    return list(db_session.execute(select(TypingIndicator)).scalars().all())


def backdate(db_session, user_id: str, location: TypingLocation, seconds: int) -> None:
    db_session.add(
        TypingIndicator(
            user_id=user_id,
            channel_id=location.channel_id,
            group_id=location.group_id,
            recipient_id=location.recipient_id,
            location_key=location.key,
            started_at=utcnow() - timedelta(seconds=seconds),
        )
    )
    db_session.commit()


def test_location_key_distinguishes_locations():
    assert TypingLocation.of(channel_id="c1").key == "channel:c1"
    assert TypingLocation.of(group_id="g1").key == "group:g1"
    assert TypingLocation.of(recipient_id="u1").key == "direct:u1"
    assert TypingLocation.of().key == "none"
    assert TypingLocation.of(channel_id="") == TypingLocation()


def test_start_typing_twice_refreshes_single_row(db_session, alice):
    location = TypingLocation.of(channel_id="general")

    first = start_typing(db_session, alice.id, location)
    second = start_typing(db_session, alice.id, location)

    rows = stored_indicators(db_session)
    assert len(rows) == 1
    assert second.id == first.id
    assert as_utc(second.started_at) > as_utc(first.started_at)


def test_concurrent_insert_for_same_location_refreshes_winner(db_session, alice, monkeypatch):
    location = TypingLocation.of(channel_id="general")
    first = start_typing(db_session, alice.id, location)

    lookup = typing_service._find
    calls = {"count": 0}

    def miss_once(db, user_id, loc):
        calls["count"] += 1
        if calls["count"] == 1:
            return None
        return lookup(db, user_id, loc)

    monkeypatch.setattr(typing_service, "_find", miss_once)

    second = start_typing(db_session, alice.id, location)

    assert calls["count"] == 2
    assert len(stored_indicators(db_session)) == 1
    assert second.id == first.id
    assert as_utc(second.started_at) > as_utc(first.started_at)


def test_distinct_locations_create_distinct_rows(db_session, alice):
    start_typing(db_session, alice.id, TypingLocation.of(channel_id="general"))
    start_typing(db_session, alice.id, TypingLocation.of(recipient_id="bob"))

    assert len(stored_indicators(db_session)) == 2


def test_start_typing_purges_stale_rows_of_all_users(db_session, alice, bob):
    location = TypingLocation.of(channel_id="general")
    backdate(db_session, bob.id, location, seconds=15)
    backdate(db_session, bob.id, TypingLocation.of(group_id="team"), seconds=5)

    start_typing(db_session, alice.id, location)

    remaining = {(row.user_id, row.location_key) for row in stored_indicators(db_session)}
    assert remaining == {(bob.id, "group:team"), (alice.id, "channel:general")}


def test_start_typing_requires_known_user(db_session):
    with pytest.raises(NotFoundError, match="User not found"):
        start_typing(db_session, "ghost", TypingLocation.of(channel_id="general"))


def test_stop_typing_removes_only_matching_location(db_session, alice):
    start_typing(db_session, alice.id, TypingLocation.of(channel_id="general"))
    start_typing(db_session, alice.id, TypingLocation.of(group_id="team"))

    stop_typing(db_session, alice.id, TypingLocation.of(channel_id="general"))

    assert [row.location_key for row in stored_indicators(db_session)] == ["group:team"]


def test_stop_typing_without_location_removes_everything_for_user(db_session, alice, bob):
    start_typing(db_session, alice.id, TypingLocation.of(channel_id="general"))
    start_typing(db_session, alice.id, TypingLocation.of(recipient_id=bob.id))
    start_typing(db_session, bob.id, TypingLocation.of(channel_id="general"))

    stop_typing(db_session, alice.id)

    assert [row.user_id for row in stored_indicators(db_session)] == [bob.id]


def test_stop_typing_with_nothing_to_delete_is_silent(db_session, alice):
    stop_typing(db_session, alice.id, TypingLocation.of(channel_id="general"))

    assert stored_indicators(db_session) == []


def test_get_typing_indicators_hides_expired_rows(db_session, alice, bob):
    backdate(db_session, alice.id, TypingLocation.of(channel_id="general"), seconds=45)
    backdate(db_session, bob.id, TypingLocation.of(channel_id="general"), seconds=20)

    visible = get_typing_indicators(db_session, TypingLocation.of(channel_id="general"))

    assert [indicator.user_id for indicator in visible] == [bob.id]


def test_get_typing_indicators_filters_by_location(db_session, alice, bob):
    start_typing(db_session, alice.id, TypingLocation.of(channel_id="general"))
    start_typing(db_session, bob.id, TypingLocation.of(group_id="team"))

    in_group = get_typing_indicators(db_session, TypingLocation.of(group_id="team"))
    everywhere = get_typing_indicators(db_session)

    assert [indicator.user_id for indicator in in_group] == [bob.id]
    assert {indicator.user_id for indicator in everywhere} == {alice.id, bob.id}
