"""Invite entities.

Invites let existing members bring friends onto the platform. A code can be
shared with many people; each person may use it once, and the code stops
working once it expires or reaches its usage cap.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import Field, model_validator

from sitesisters.domain.model.common import DomainModel
from sitesisters.domain.value import InviteCode, InviteId, UserId


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class Invite(DomainModel):
    """Invite entity.

    Business rules:
    - Codes are unique and case-sensitive
    - uses never exceeds max_uses when a cap is set
    - uses only changes through the store's atomic consume primitive
    - Invites are never deleted by the invite lifecycle
    """

    id: InviteId
    code: InviteCode
    inviter_user_id: Optional[UserId] = None  # None for system-issued invites
    uses: int = Field(default=0, ge=0)
    max_uses: Optional[int] = Field(default=None, gt=0)  # None means unlimited
    expires_at: Optional[datetime] = None  # None means never expires
    created_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def check_uses_within_cap(self) -> "Invite":
        """Enforce uses <= max_uses."""
        if self.max_uses is not None and self.uses > self.max_uses:
            raise ValueError("uses cannot exceed max_uses")
        return self

    def is_expired(self, now: datetime) -> bool:
        """Whether the invite expired strictly before now."""
        return self.expires_at is not None and self.expires_at < now

    def is_exhausted(self) -> bool:
        """Whether every allowed use has been taken."""
        return self.max_uses is not None and self.uses >= self.max_uses

    def is_valid_at(self, now: datetime) -> bool:
        """Validity predicate shared by validation and consumption."""
        return not self.is_expired(now) and not self.is_exhausted()

    def status_at(self, now: datetime) -> "InviteStatus":
        """Read-only snapshot of this invite at the given time."""
        return InviteStatus(
            id=self.id,
            code=self.code,
            inviter_user_id=self.inviter_user_id,
            uses=self.uses,
            max_uses=self.max_uses,
            expires_at=self.expires_at,
            is_valid=self.is_valid_at(now),
        )


class InviteStatus(DomainModel):
    """Snapshot of an invite as returned by a lookup.

    It may be stale the instant after it is read, so consumption never
    trusts it; the store re-checks validity at write time.
    """

    id: InviteId
    code: InviteCode
    inviter_user_id: Optional[UserId] = None
    uses: int
    max_uses: Optional[int] = None
    expires_at: Optional[datetime] = None
    is_valid: bool


class InviteUsage(DomainModel):
    """One user's consumption of one invite.

    At most one record exists per (invite_id, user_id).
    """

    invite_id: InviteId
    user_id: UserId
    consumed_at: datetime = Field(default_factory=utcnow)
