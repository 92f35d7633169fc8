"""Tests for message destination validation and routing."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from app.core.errors import (
    AuthorNotFound,
    InvalidDestination,
    NotAMember,
    RecipientNotFound,
    ReplyCrossConversation,
    ReplyTargetNotFound,
)
from app.models import ChannelType, Message, MessageType
from app.schemas import ChannelCreate, GroupCreate, LinkPreview, MessageCreate
from app.services import create_channel, create_group, send_message


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


async def no_preview(url: str) -> LinkPreview | None:
    return None


@pytest.fixture()
def alice(make_user):
    return make_user("Alice")


@pytest.fixture()
def bob(make_user):
    return make_user("Bob")


@pytest.fixture()
def channel(db_session, alice):
    return create_channel(
        db_session, ChannelCreate(name="general", type=ChannelType.PUBLIC, created_by=alice.id)
    )


def message_count(db_session) -> int:
    return db_session.execute(select(func.count(Message.id))).scalar_one()


@pytest.mark.anyio("asyncio")
async def test_send_to_channel_returns_author_and_empty_receipts(db_session, alice, channel):
    result = await send_message(
        db_session,
        MessageCreate(content="hello", author_id=alice.id, channel_id=channel.id),
        preview_fetcher=no_preview,
    )

    assert result.content == "hello"
    assert result.type == MessageType.TEXT
    assert result.channel_id == channel.id
    assert result.group_id is None and result.recipient_id is None
    assert result.author.id == alice.id
    assert result.read_by == []
    assert result.reply_to is None
    assert message_count(db_session) == 1


@pytest.mark.anyio("asyncio")
async def test_unknown_author_is_rejected_first(db_session, channel):
    with pytest.raises(AuthorNotFound, match="Author user does not exist"):
        await send_message(
            db_session,
            MessageCreate(content="hi", author_id="nobody", channel_id=channel.id, group_id="g"),
            preview_fetcher=no_preview,
        )


@pytest.mark.anyio("asyncio")
@pytest.mark.parametrize(
    "destination",
    [
        {},
        {"channel_id": "c", "recipient_id": "r"},
        {"channel_id": "c", "group_id": "g", "recipient_id": "r"},
    ],
)
async def test_requires_exactly_one_destination(db_session, alice, destination):
    with pytest.raises(InvalidDestination, match="exactly one destination"):
        await send_message(
            db_session,
            MessageCreate(content="hi", author_id=alice.id, **destination),
            preview_fetcher=no_preview,
        )
    assert message_count(db_session) == 0


@pytest.mark.anyio("asyncio")
async def test_non_member_cannot_post_to_channel(db_session, bob, channel):
    with pytest.raises(NotAMember, match="not a member of the specified channel"):
        await send_message(
            db_session,
            MessageCreate(content="hi", author_id=bob.id, channel_id=channel.id),
            preview_fetcher=no_preview,
        )


@pytest.mark.anyio("asyncio")
async def test_missing_channel_is_reported_as_not_a_member(db_session, alice):
    with pytest.raises(NotAMember):
        await send_message(
            db_session,
            MessageCreate(content="hi", author_id=alice.id, channel_id="no-such-channel"),
            preview_fetcher=no_preview,
        )


@pytest.mark.anyio("asyncio")
async def test_non_member_cannot_post_to_group(db_session, alice, bob, make_user):
    carol = make_user("Carol")
    group = create_group(db_session, GroupCreate(created_by=alice.id, member_ids=[carol.id]))

    with pytest.raises(NotAMember, match="not a member of the specified group"):
        await send_message(
            db_session,
            MessageCreate(content="hi", author_id=bob.id, group_id=group.id),
            preview_fetcher=no_preview,
        )


@pytest.mark.anyio("asyncio")
async def test_direct_message_requires_existing_recipient(db_session, alice):
    with pytest.raises(RecipientNotFound, match="Recipient user does not exist"):
        await send_message(
            db_session,
            MessageCreate(content="hi", author_id=alice.id, recipient_id="ghost"),
            preview_fetcher=no_preview,
        )


@pytest.mark.anyio("asyncio")
async def test_reply_target_must_exist(db_session, alice, channel):
    with pytest.raises(ReplyTargetNotFound, match="Reply target message does not exist"):
        await send_message(
            db_session,
            MessageCreate(content="hi", author_id=alice.id, channel_id=channel.id, reply_to_id="missing"),
            preview_fetcher=no_preview,
        )


@pytest.mark.anyio("asyncio")
async def test_reply_across_channels_is_rejected(db_session, alice, channel):
    other = create_channel(
        db_session, ChannelCreate(name="random", type=ChannelType.PUBLIC, created_by=alice.id)
    )
    original = await send_message(
        db_session,
        MessageCreate(content="first", author_id=alice.id, channel_id=channel.id),
        preview_fetcher=no_preview,
    )

    with pytest.raises(ReplyCrossConversation, match="same conversation"):
        await send_message(
            db_session,
            MessageCreate(content="reply", author_id=alice.id, channel_id=other.id, reply_to_id=original.id),
            preview_fetcher=no_preview,
        )


@pytest.mark.anyio("asyncio")
async def test_reply_in_direct_thread_accepts_either_direction(db_session, alice, bob):
    original = await send_message(
        db_session,
        MessageCreate(content="ping", author_id=alice.id, recipient_id=bob.id),
        preview_fetcher=no_preview,
    )

    reply = await send_message(
        db_session,
        MessageCreate(content="pong", author_id=bob.id, recipient_id=alice.id, reply_to_id=original.id),
        preview_fetcher=no_preview,
    )

    assert reply.reply_to is not None
    assert reply.reply_to.id == original.id
    assert reply.reply_to.content == "ping"


@pytest.mark.anyio("asyncio")
async def test_reply_to_other_direct_thread_is_rejected(db_session, alice, bob, make_user):
    carol = make_user("Carol")
    original = await send_message(
        db_session,
        MessageCreate(content="to carol", author_id=alice.id, recipient_id=carol.id),
        preview_fetcher=no_preview,
    )

    with pytest.raises(ReplyCrossConversation):
        await send_message(
            db_session,
            MessageCreate(content="wrong", author_id=alice.id, recipient_id=bob.id, reply_to_id=original.id),
            preview_fetcher=no_preview,
        )


@pytest.mark.anyio("asyncio")
async def test_link_preview_attached_for_first_url(db_session, alice, channel):
    requested: list[str] = []

    async def fetcher(url: str) -> LinkPreview | None:
        requested.append(url)
        return LinkPreview(url=url, title="Example", description=None, image=None)

    result = await send_message(
        db_session,
        MessageCreate(
            content="see https://example.com/a, and https://example.org/b",
            author_id=alice.id,
            channel_id=channel.id,
        ),
        preview_fetcher=fetcher,
    )

    assert requested == ["https://example.com/a"]
    assert result.link_preview is not None
    assert result.link_preview.title == "Example"
    stored = db_session.get(Message, result.id)
    assert stored.link_preview["url"] == "https://example.com/a"


@pytest.mark.anyio("asyncio")
async def test_failing_preview_fetcher_does_not_block_send(db_session, alice, channel):
    async def broken(url: str) -> LinkPreview | None:
        raise RuntimeError("network down")

    result = await send_message(
        db_session,
        MessageCreate(content="look https://example.com", author_id=alice.id, channel_id=channel.id),
        preview_fetcher=broken,
    )

    assert result.link_preview is None
    assert message_count(db_session) == 1


@pytest.mark.anyio("asyncio")
async def test_non_text_messages_skip_link_preview(db_session, alice, channel):
    async def unexpected(url: str) -> LinkPreview | None:
        raise AssertionError("preview should not be requested")

    result = await send_message(
        db_session,
        MessageCreate(
            content="https://cdn.example.com/cat.png",
            type=MessageType.IMAGE,
            image_url="https://cdn.example.com/cat.png",
            author_id=alice.id,
            channel_id=channel.id,
        ),
        preview_fetcher=unexpected,
    )

    assert result.link_preview is None
    assert result.image_url == "https://cdn.example.com/cat.png"
