"""Create users, conversations, user_queries, bot_responses and message_reactions

Revision ID: initialize_database
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "initialize_database"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("platform", sa.String(32), nullable=False, server_default="slack"),
        sa.Column("platform_user_id", sa.String(64), nullable=False),
        sa.Column("username", sa.String(256), nullable=True),
        sa.Column("display_name", sa.String(256), nullable=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("avatar_url", sa.String(1024), nullable=True),
        sa.Column(
            "platform_metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=True
        ),
        sa.Column(
            "created_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")
        ),
        sa.Column(
            "updated_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "platform", "platform_user_id", name="uq_users_platform_user"
        ),
    )
    op.create_index(
        "ix_users_platform_user_id", "users", ["platform_user_id"], unique=False
    )

    op.create_table(
        "conversations",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("platform", sa.String(32), nullable=False, server_default="slack"),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("channel_id", sa.String(64), nullable=False),
        sa.Column("thread_ts", sa.String(32), nullable=True),
        sa.Column("title", sa.String(256), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        sa.Column(
            "created_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")
        ),
        sa.Column(
            "updated_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_conversations_user_channel_thread",
        "conversations",
        ["user_id", "channel_id", "thread_ts"],
        unique=False,
    )

    op.create_table(
        "user_queries",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("conversation_id", sa.UUID(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("source_ts", sa.String(32), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")
        ),
        sa.ForeignKeyConstraint(
            ["conversation_id"], ["conversations.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "conversation_id", "source_ts", name="uq_user_queries_source_message"
        ),
    )
    op.create_index(
        "ix_user_queries_conversation_id",
        "user_queries",
        ["conversation_id"],
        unique=False,
    )

    op.create_table(
        "bot_responses",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("query_id", sa.UUID(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column("slack_message_ts", sa.String(32), nullable=True),
        sa.Column("tokens_used", sa.Integer(), nullable=True),
        sa.Column("model_used", sa.String(128), nullable=True),
        sa.Column("processing_time_ms", sa.Integer(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")
        ),
        sa.ForeignKeyConstraint(["query_id"], ["user_queries.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_bot_responses_query_id", "bot_responses", ["query_id"], unique=False
    )
    op.create_index(
        "ix_bot_responses_slack_message_ts",
        "bot_responses",
        ["slack_message_ts"],
        unique=False,
    )

    op.create_table(
        "message_reactions",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("response_id", sa.UUID(), nullable=False),
        sa.Column("reactor_id", sa.String(64), nullable=False),
        sa.Column("reaction_name", sa.String(128), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")
        ),
        sa.ForeignKeyConstraint(
            ["response_id"], ["bot_responses.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "response_id",
            "reactor_id",
            "reaction_name",
            name="uq_message_reactions_response_reactor_name",
        ),
    )
    op.create_index(
        "ix_message_reactions_response_id",
        "message_reactions",
        ["response_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_message_reactions_response_id", table_name="message_reactions")
    op.drop_table("message_reactions")
    op.drop_index("ix_bot_responses_slack_message_ts", table_name="bot_responses")
    op.drop_index("ix_bot_responses_query_id", table_name="bot_responses")
    op.drop_table("bot_responses")
    op.drop_index("ix_user_queries_conversation_id", table_name="user_queries")
    op.drop_table("user_queries")
    op.drop_index("ix_conversations_user_channel_thread", table_name="conversations")
    op.drop_table("conversations")
    op.drop_index("ix_users_platform_user_id", table_name="users")
    op.drop_table("users")
