"""create chat tables

Revision ID: 20261017_01
Revises:
Create Date: 2026-10-17 00:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import mysql


# revision identifiers, used by Alembic.
revision = "20261017_01"
down_revision = None
branch_labels = None
depends_on = None


AUTH_PROVIDER = sa.Enum("google", "github", "discord", name="auth_provider")
USER_STATUS = sa.Enum("online", "away", "busy", "offline", name="user_status")
CHANNEL_TYPE = sa.Enum("public", "private", name="channel_type")
MEMBER_ROLE = sa.Enum("owner", "admin", "member", name="member_role")
MESSAGE_TYPE = sa.Enum("text", "image", "system", name="message_type")

TIMESTAMP = sa.DateTime(timezone=True).with_variant(mysql.DATETIME(fsp=6), "mysql")


def _id_column() -> sa.Column:
    return sa.Column("id", sa.String(length=36), primary_key=True, nullable=False)


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(name, TIMESTAMP, server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    op.create_table(
        "users",
        _id_column(),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("display_name", sa.String(length=128), nullable=False),
        sa.Column("avatar_url", sa.String(length=512), nullable=True),
        sa.Column("provider", AUTH_PROVIDER, nullable=False),
        sa.Column("provider_id", sa.String(length=255), nullable=False),
        sa.Column("status", USER_STATUS, nullable=False, server_default="offline"),
        sa.Column("last_seen", TIMESTAMP, nullable=True),
        _created_at(),
        _created_at("updated_at"),
        sa.UniqueConstraint("provider", "provider_id", name="uq_user_provider_identity"),
        mysql_charset="utf8mb4",
    )

    op.create_table(
        "channels",
        _id_column(),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", CHANNEL_TYPE, nullable=False),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        _created_at(),
        _created_at("updated_at"),
        mysql_charset="utf8mb4",
    )

    op.create_table(
        "channel_members",
        _id_column(),
        sa.Column(
            "channel_id",
            sa.String(length=36),
            sa.ForeignKey("channels.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.String(length=36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("role", MEMBER_ROLE, nullable=False, server_default="member"),
        _created_at("joined_at"),
        sa.UniqueConstraint("channel_id", "user_id", name="uq_channel_member"),
        mysql_charset="utf8mb4",
    )

    op.create_table(
        "groups",
        _id_column(),
        sa.Column("name", sa.String(length=128), nullable=True),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        _created_at(),
        _created_at("updated_at"),
        mysql_charset="utf8mb4",
    )

    op.create_table(
        "group_members",
        _id_column(),
        sa.Column(
            "group_id",
            sa.String(length=36),
            sa.ForeignKey("groups.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.String(length=36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _created_at("joined_at"),
        sa.UniqueConstraint("group_id", "user_id", name="uq_group_member"),
        mysql_charset="utf8mb4",
    )

    op.create_table(
        "messages",
        _id_column(),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("type", MESSAGE_TYPE, nullable=False, server_default="text"),
        sa.Column("author_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "channel_id",
            sa.String(length=36),
            sa.ForeignKey("channels.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "group_id",
            sa.String(length=36),
            sa.ForeignKey("groups.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("recipient_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("image_url", sa.String(length=1024), nullable=True),
        sa.Column("link_preview", sa.JSON(), nullable=True),
        sa.Column(
            "reply_to_id",
            sa.String(length=36),
            sa.ForeignKey("messages.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("edited_at", TIMESTAMP, nullable=True),
        _created_at(),
        mysql_charset="utf8mb4",
    )
    op.create_index("ix_messages_channel_created_at", "messages", ["channel_id", "created_at"])
    op.create_index("ix_messages_group_created_at", "messages", ["group_id", "created_at"])
    op.create_index(
        "ix_messages_direct_pair", "messages", ["author_id", "recipient_id", "created_at"]
    )

    op.create_table(
        "message_reads",
        _id_column(),
        sa.Column(
            "message_id",
            sa.String(length=36),
            sa.ForeignKey("messages.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.String(length=36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _created_at("read_at"),
        sa.UniqueConstraint("message_id", "user_id", name="uq_message_read"),
        mysql_charset="utf8mb4",
    )
    op.create_index("ix_message_reads_user", "message_reads", ["user_id"])

    op.create_table(
        "typing_indicators",
        _id_column(),
        sa.Column(
            "user_id",
            sa.String(length=36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "channel_id",
            sa.String(length=36),
            sa.ForeignKey("channels.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "group_id",
            sa.String(length=36),
            sa.ForeignKey("groups.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "recipient_id",
            sa.String(length=36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("location_key", sa.String(length=160), nullable=False),
        _created_at("started_at"),
        sa.UniqueConstraint("user_id", "location_key", name="uq_typing_user_location"),
        mysql_charset="utf8mb4",
    )
    op.create_index("ix_typing_started_at", "typing_indicators", ["started_at"])


def downgrade() -> None:
    op.drop_index("ix_typing_started_at", table_name="typing_indicators")
    op.drop_table("typing_indicators")
    op.drop_index("ix_message_reads_user", table_name="message_reads")
    op.drop_table("message_reads")
    op.drop_index("ix_messages_direct_pair", table_name="messages")
    op.drop_index("ix_messages_group_created_at", table_name="messages")
    op.drop_index("ix_messages_channel_created_at", table_name="messages")
    op.drop_table("messages")
    op.drop_table("group_members")
    op.drop_table("groups")
    op.drop_table("channel_members")
    op.drop_table("channels")
    op.drop_table("users")

    bind = op.get_bind()
    for enum in (MESSAGE_TYPE, MEMBER_ROLE, CHANNEL_TYPE, USER_STATUS, AUTH_PROVIDER):
        enum.drop(bind, checkfirst=True)
