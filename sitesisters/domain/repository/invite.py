"""Invite repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime

from sitesisters.domain.model.invite import Invite, InviteStatus, InviteUsage
from sitesisters.domain.value import ConsumeOutcome, InviteCode, InviteId, UserId


class InviteRepository(ABC):
    """Repository for invites and their usage log.

    Defines the contract for invite persistence operations.
    Implementations live in the infrastructure layer and raise
    StoreError when the store itself fails.
    """

    @abstractmethod
    async def add(self, invite: Invite) -> Invite:
        """Insert a new invite.

        Invites are issued outside the invite lifecycle; this exists for
        seeding and tests. It never updates an existing invite.

        Args:
            invite: The invite to insert

        Returns:
            The stored invite

        Raises:
            ValueError: If the id or code is already taken
        """
        pass

    @abstractmethod
    async def find_by_code(self, code: InviteCode) -> Invite | None:
        """Find an invite by its exact code.

        Args:
            code: The invite code

        Returns:
            The invite if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_status(self, code: InviteCode, now: datetime) -> InviteStatus | None:
        """Look up a validity snapshot for a code.

        Args:
            code: The invite code
            now: Time the validity predicate is evaluated at

        Returns:
            The snapshot if the code exists, None otherwise
        """
        pass

    @abstractmethod
    async def consume(
        self, code: InviteCode, user_id: UserId, now: datetime
    ) -> ConsumeOutcome:
        """Atomically record that a user used a code.

        One atomic unit: re-checks existence, prior usage by this user,
        self-referral, expiry and the usage cap at write time, then inserts
        the usage record and increments uses. Conflicting attempts on the
        same invite are serialised, and the outcome is durable before it is
        returned.

        Args:
            code: The invite code
            user_id: The consuming user
            now: Time the validity predicate is evaluated at

        Returns:
            CONSUMED or ALREADY_CONSUMED on success, otherwise the decline
        """
        pass

    @abstractmethod
    async def find_usage(
        self, invite_id: InviteId, user_id: UserId
    ) -> InviteUsage | None:
        """Find a user's usage record for an invite.

        Inspection of the usage log for audits and tests. The consume path
        never calls this; prior usage is re-checked inside `consume`.

        Args:
            invite_id: The invite's ID
            user_id: The user's ID

        Returns:
            The usage record if the user consumed the invite, None otherwise
        """
        pass

    @abstractmethod
    async def count_usages(self, invite_id: InviteId) -> int:
        """Count usage records for an invite.

        Inspection only, like `find_usage`. Always equals the invite's
        uses when every use went through `consume`.

        Args:
            invite_id: The invite's ID

        Returns:
            Number of distinct users that consumed the invite
        """
        pass
