"""Consume invite use case."""

from datetime import datetime

from pydantic import BaseModel

from sitesisters.application.usecase.base import BaseUseCase
from sitesisters.domain.model import PendingInvite
from sitesisters.domain.service import InviteConsumer
from sitesisters.domain.value import DeclineReason, UserId


class ConsumeInviteRequest(BaseModel):
    """Consume invite request.

    `pending_code` and `pending_expires_at` describe the carrier set by the
    invite link; its code is used when the client did not send one.
    """

    user_id: UserId | None = None
    code: str | None = None
    pending_code: str | None = None
    pending_expires_at: datetime | None = None


class ConsumeInviteResponse(BaseModel):
    """Consume invite response.

    `pending` is the carrier after the attempt: CLEARED when one was
    carried, ABSENT otherwise.
    """

    ok: bool
    already_consumed: bool = False
    reason: DeclineReason | None = None
    pending: PendingInvite = PendingInvite()


class ConsumeInviteUseCase(
    BaseUseCase[ConsumeInviteRequest, ConsumeInviteResponse]
):
    """Use case for using an invite code after signup."""

    def __init__(self, invite_consumer: InviteConsumer) -> None:
        """Initialize consume invite use case.

        Args:
            invite_consumer: Invite consumption service
        """
        self.invite_consumer = invite_consumer

    async def execute(self, request: ConsumeInviteRequest) -> ConsumeInviteResponse:
        """Consume the explicit code, or the pending one if none was sent.

        An expired carrier contributes no code. Whatever was carried is
        cleared once the code has been submitted.

        Args:
            request: Request with the caller's identity, code and carrier

        Returns:
            Whether the invite is now recorded for the user, and the carrier
            to hand back to the client

        Raises:
            UnauthenticatedError: If no user is signed in
            ConsumeError: If the invite store failed
        """
        try:
            pending = PendingInvite.restore(
                request.pending_code, request.pending_expires_at
            )
        except ValueError:
            pending = PendingInvite.absent()  # An unusable carrier is the same as none

        raw_code = request.code
        if raw_code is None or not raw_code.strip():
            carried = pending.pending_code(self.invite_consumer.clock())
            raw_code = carried.root if carried else None

        result = await self.invite_consumer.consume(raw_code, request.user_id)
        return ConsumeInviteResponse(
            ok=result.ok,
            already_consumed=result.already_consumed,
            reason=result.reason,
            pending=pending.clear(),
        )
