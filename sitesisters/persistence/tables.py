"""SQLAlchemy table definitions for SiteSisters.

These table definitions are used with SQLAlchemy Core.
They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# USERS TABLE (read-only for the invite lifecycle)
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("display_name", String(255), nullable=True),
    Column("email", String(255), nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

Index("idx_users_email", users_table.c.email)

# ============================================================================
# INVITES TABLE
# ============================================================================
invites_table = Table(
    "invites",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("code", String(255), nullable=False, unique=True),  # Case-sensitive
    Column(
        "inviter_user_id",
        UUID,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,  # NULL for system-issued invites
    ),
    Column("uses", Integer, nullable=False, server_default="0"),
    Column("max_uses", Integer, nullable=True),  # NULL means unlimited
    Column("expires_at", TIMESTAMP(timezone=True), nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    CheckConstraint("uses >= 0", name="invites_uses_non_negative"),
    CheckConstraint(
        "max_uses IS NULL OR max_uses > 0", name="invites_max_uses_positive"
    ),
    CheckConstraint(
        "max_uses IS NULL OR uses <= max_uses", name="invites_uses_within_cap"
    ),
)

Index("idx_invites_inviter_user_id", invites_table.c.inviter_user_id)

# ============================================================================
# INVITE USAGES TABLE (one row per user per invite)
# ============================================================================
invite_usages_table = Table(
    "invite_usages",
    metadata,
    Column(
        "invite_id", UUID, ForeignKey("invites.id", ondelete="CASCADE"), nullable=False
    ),
    Column("user_id", UUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column(
        "consumed_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    PrimaryKeyConstraint("invite_id", "user_id", name="pk_invite_usages"),
)

Index("idx_invite_usages_user_id", invite_usages_table.c.user_id)
