"""initial_invite_schema

Create the schema for SiteSisters invites:
- Users (read by the invite lifecycle for inviter names)
- Invites (shareable codes with optional usage cap and expiry)
- Invite usages (one row per user per invite)

Revision ID: 3c7f1d2a9b64
Revises:
Create Date: 2026-10-17 14:12:05.418203

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3c7f1d2a9b64"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Enable required extensions
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ========================================================================
    # USERS table
    # ========================================================================
    op.create_table(
        "users",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("uuid_generate_v4()"),
            nullable=False,
        ),
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_users_email", "users", ["email"])

    # ========================================================================
    # INVITES table
    # ========================================================================
    op.create_table(
        "invites",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("uuid_generate_v4()"),
            nullable=False,
        ),
        sa.Column("code", sa.String(255), nullable=False),  # Case-sensitive
        sa.Column("inviter_user_id", sa.UUID(), nullable=True),  # NULL = system
        sa.Column("uses", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("max_uses", sa.Integer(), nullable=True),  # NULL = unlimited
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.ForeignKeyConstraint(
            ["inviter_user_id"], ["users.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code", name="invites_code_key"),
        sa.CheckConstraint("uses >= 0", name="invites_uses_non_negative"),
        sa.CheckConstraint(
            "max_uses IS NULL OR max_uses > 0", name="invites_max_uses_positive"
        ),
        # Last line of defence for the usage cap
        sa.CheckConstraint(
            "max_uses IS NULL OR uses <= max_uses", name="invites_uses_within_cap"
        ),
    )
    op.create_index("idx_invites_inviter_user_id", "invites", ["inviter_user_id"])

    # ========================================================================
    # INVITE_USAGES table
    # ========================================================================
    op.create_table(
        "invite_usages",
        sa.Column("invite_id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column(
            "consumed_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.ForeignKeyConstraint(["invite_id"], ["invites.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("invite_id", "user_id", name="pk_invite_usages"),
    )
    op.create_index("idx_invite_usages_user_id", "invite_usages", ["user_id"])


def downgrade() -> None:
    """Downgrade schema."""
    # Drop tables (in reverse order of dependencies)
    op.drop_index("idx_invite_usages_user_id", table_name="invite_usages")
    op.drop_table("invite_usages")
    op.drop_index("idx_invites_inviter_user_id", table_name="invites")
    op.drop_table("invites")
    op.drop_index("idx_users_email", table_name="users")
    op.drop_table("users")
