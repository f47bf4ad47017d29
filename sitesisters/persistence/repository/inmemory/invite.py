"""In-memory invite repository for testing."""

import asyncio
from datetime import datetime
from typing import Optional

from sitesisters.domain.model.invite import Invite, InviteStatus, InviteUsage
from sitesisters.domain.repository.invite import InviteRepository
from sitesisters.domain.value import ConsumeOutcome, InviteCode, InviteId, UserId


class InMemoryInviteRepository(InviteRepository):
    """In-memory implementation of InviteRepository for testing.

    A single lock serialises consume calls, standing in for the row lock
    the PostgreSQL implementation takes.
    """

    def __init__(self) -> None:
        self._invites: dict[str, Invite] = {}
        self._usages: dict[tuple[InviteId, UserId], InviteUsage] = {}
        self._lock = asyncio.Lock()

    async def add(self, invite: Invite) -> Invite:
        """Insert a new invite.

        Raises:
            ValueError: If the id or code is already taken
        """
        if invite.code.root in self._invites or any(
            existing.id == invite.id for existing in self._invites.values()
        ):
            raise ValueError(f"Invite already exists: {invite.code.prefix}")
        self._invites[invite.code.root] = invite
        return invite

    async def find_by_code(self, code: InviteCode) -> Optional[Invite]:
        """Find an invite by its exact code."""
        return self._invites.get(code.root)

    async def get_status(
        self, code: InviteCode, now: datetime
    ) -> Optional[InviteStatus]:
        """Look up a validity snapshot for a code."""
        invite = self._invites.get(code.root)
        return invite.status_at(now) if invite else None

    async def consume(
        self, code: InviteCode, user_id: UserId, now: datetime
    ) -> ConsumeOutcome:
        """Atomically record that a user used a code."""
        async with self._lock:
            invite = self._invites.get(code.root)
            if invite is None:
                return ConsumeOutcome.NOT_FOUND
            if (invite.id, user_id) in self._usages:
                return ConsumeOutcome.ALREADY_CONSUMED
            if invite.inviter_user_id == user_id:
                return ConsumeOutcome.SELF_REFERRAL
            if invite.is_expired(now):
                return ConsumeOutcome.EXPIRED
            if invite.is_exhausted():
                return ConsumeOutcome.MAX_USES_REACHED

            self._usages[(invite.id, user_id)] = InviteUsage(
                invite_id=invite.id, user_id=user_id, consumed_at=now
            )
            self._invites[code.root] = invite.model_copy(
                update={"uses": invite.uses + 1}
            )
            return ConsumeOutcome.CONSUMED

    async def find_usage(
        self, invite_id: InviteId, user_id: UserId
    ) -> Optional[InviteUsage]:
        """Find a user's usage record for an invite."""
        return self._usages.get((invite_id, user_id))

    async def count_usages(self, invite_id: InviteId) -> int:
        """Count usage records for an invite."""
        return sum(1 for key in self._usages if key[0] == invite_id)
