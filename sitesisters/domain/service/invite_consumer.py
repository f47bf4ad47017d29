"""Invite consumption domain service."""

from collections.abc import Callable
from datetime import datetime

import logfire

from sitesisters.domain.error import ConsumeError, StoreError, UnauthenticatedError
from sitesisters.domain.model.invite import utcnow
from sitesisters.domain.repository import InviteRepository
from sitesisters.domain.value import ConsumeOutcome, DeclineReason, InviteCode, UserId
from sitesisters.domain.value.common import ValueObject

from .base import Service


class ConsumeResult(ValueObject):
    """Outcome of a consume request.

    `ok` is True both for a new consumption and for a repeat by the same
    user; `already_consumed` tells them apart.
    """

    ok: bool
    reason: DeclineReason | None = None
    already_consumed: bool = False


class InviteConsumer(Service):
    """Records that a signed-in user used an invite code.

    All checks that guard the usage counter run inside the store's atomic
    consume primitive. Nothing here reads a snapshot first and then writes,
    since the snapshot could be stale by the time of the write.
    """

    def __init__(
        self,
        invite_repository: InviteRepository,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize invite consumer.

        Args:
            invite_repository: Invite repository
            clock: Source of the current time
        """
        self.invite_repository = invite_repository
        self.clock = clock

    async def consume(self, raw_code: object, user_id: UserId | None) -> ConsumeResult:
        """Consume an invite code for a user.

        Args:
            raw_code: Untrusted code, trimmed before use
            user_id: Verified identity of the caller, None if not signed in

        Returns:
            Consume result; declines carry a reason

        Raises:
            UnauthenticatedError: If no user was supplied
            ConsumeError: If the store failed; nothing was recorded
        """
        if user_id is None:
            logfire.warn("Invite consume without authenticated user")
            raise UnauthenticatedError("Sign in to use an invite code")

        try:
            code = InviteCode.parse(raw_code)
        except ValueError:
            logfire.info("Invite consume with malformed code", user_id=str(user_id))
            return ConsumeResult(ok=False, reason=DeclineReason.NOT_FOUND)
        if code is None:
            logfire.info("Invite consume without code", user_id=str(user_id))
            return ConsumeResult(ok=False, reason=DeclineReason.NO_CODE)

        with logfire.span(
            "invite_consumer.consume", code=code.prefix, user_id=str(user_id)
        ):
            try:
                outcome = await self.invite_repository.consume(
                    code, user_id, self.clock()
                )
            except StoreError as e:
                logfire.error(
                    "Invite consume failed",
                    code=code.prefix,
                    user_id=str(user_id),
                    error=str(e),
                )
                raise ConsumeError(code.prefix) from e

            if outcome.succeeded:
                logfire.info(
                    "Invite consumed",
                    code=code.prefix,
                    user_id=str(user_id),
                    outcome=outcome.value,
                )
                return ConsumeResult(
                    ok=True,
                    already_consumed=outcome == ConsumeOutcome.ALREADY_CONSUMED,
                )

            logfire.info(
                "Invite consume declined",
                code=code.prefix,
                user_id=str(user_id),
                outcome=outcome.value,
            )
            return ConsumeResult(ok=False, reason=outcome.decline_reason)
