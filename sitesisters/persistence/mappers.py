"""Mappers between domain models and database rows.

Converts between Pydantic domain models and dict rows for SQLAlchemy Core.
"""

from typing import Any, Dict
from uuid import UUID

from sitesisters.domain.model import Invite, InviteUsage, User
from sitesisters.domain.value import InviteCode, InviteId, UserId


def _as_uuid(value: Any) -> UUID:
    return UUID(value) if isinstance(value, str) else value


def row_to_user(row: Dict[str, Any]) -> User:
    """Convert database row to User domain model.

    Args:
        row: Database row as dict

    Returns:
        User domain model
    """
    return User(
        id=UserId(_as_uuid(row["id"])),
        display_name=row.get("display_name"),
        email=row.get("email"),
        created_at=row["created_at"],
    )


def user_to_dict(user: User) -> Dict[str, Any]:
    """Convert User domain model to database dict.

    Args:
        user: User domain model

    Returns:
        Dict suitable for database insertion/update
    """
    return user.model_dump()


def row_to_invite(row: Dict[str, Any]) -> Invite:
    """Convert database row to Invite domain model.

    Args:
        row: Database row as dict

    Returns:
        Invite domain model
    """
    return Invite(
        id=InviteId(_as_uuid(row["id"])),
        code=InviteCode(root=row["code"]),
        inviter_user_id=UserId(_as_uuid(row["inviter_user_id"]))
        if row.get("inviter_user_id")
        else None,
        uses=row["uses"],
        max_uses=row.get("max_uses"),
        expires_at=row.get("expires_at"),
        created_at=row["created_at"],
    )


def invite_to_dict(invite: Invite) -> Dict[str, Any]:
    """Convert Invite domain model to database dict.

    Args:
        invite: Invite domain model

    Returns:
        Dict suitable for database insertion
    """
    # InviteCode is a RootModel, so model_dump() flattens it to the string
    return invite.model_dump()


def row_to_invite_usage(row: Dict[str, Any]) -> InviteUsage:
    """Convert database row to InviteUsage domain model.

    Args:
        row: Database row as dict

    Returns:
        InviteUsage domain model
    """
    return InviteUsage(
        invite_id=InviteId(_as_uuid(row["invite_id"])),
        user_id=UserId(_as_uuid(row["user_id"])),
        consumed_at=row["consumed_at"],
    )
