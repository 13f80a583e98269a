"""add chat_turns table

Revision ID: 5c1e2d7a9b3f
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1e2d7a9b3f"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema: chat_turns table with session and user lookup indexes."""
    op.create_table(
        "chat_turns",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("session_id", sa.String(length=255), nullable=False),
        sa.Column("session_title", sa.String(length=500), nullable=True),
        sa.Column("thread_id", sa.String(length=255), nullable=True),
        sa.Column("role", sa.String(length=16), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("tokens_used", sa.Integer(), nullable=True),
        sa.Column("model", sa.String(length=100), nullable=True),
        sa.Column("response_time_ms", sa.Integer(), nullable=True),
        sa.Column(
            "is_thread_marker",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column(
            "is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")
        ),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("timezone('utc', now())"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("timezone('utc', now())"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_chat_turns_session_id_created_at",
        "chat_turns",
        ["session_id", "created_at"],
        unique=False,
    )
    op.create_index(
        "ix_chat_turns_user_id_is_active",
        "chat_turns",
        ["user_id", "is_active"],
        unique=False,
    )
    op.create_index(
        op.f("ix_chat_turns_created_at"), "chat_turns", ["created_at"], unique=False
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f("ix_chat_turns_created_at"), table_name="chat_turns")
    op.drop_index("ix_chat_turns_user_id_is_active", table_name="chat_turns")
    op.drop_index("ix_chat_turns_session_id_created_at", table_name="chat_turns")
    op.drop_table("chat_turns")
