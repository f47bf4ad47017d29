"""Resolve invite use case."""

import logfire
from pydantic import BaseModel

from sitesisters.application.usecase.base import BaseUseCase
from sitesisters.domain.error import DomainError
from sitesisters.domain.service import InviteValidator, UserService
from sitesisters.domain.value import DeclineReason, UserId


class ResolveInviteRequest(BaseModel):
    """Resolve invite request."""

    code: str | None = None


class ResolveInviteResponse(BaseModel):
    """Resolve invite response.

    The inviter's ID is never part of the response.
    """

    valid: bool
    inviter_display_name: str | None = None
    reason: DeclineReason | None = None


class ResolveInviteUseCase(
    BaseUseCase[ResolveInviteRequest, ResolveInviteResponse]
):
    """Use case for checking an invite code before signup.

    Lets the signup page show who invited the user, or why the code
    will not work.
    """

    def __init__(
        self, invite_validator: InviteValidator, user_service: UserService
    ) -> None:
        """Initialize resolve invite use case.

        Args:
            invite_validator: Invite validation service
            user_service: User domain service
        """
        self.invite_validator = invite_validator
        self.user_service = user_service

    async def execute(self, request: ResolveInviteRequest) -> ResolveInviteResponse:
        """Validate a code and attach the inviter's display name.

        Args:
            request: Request with the raw code

        Returns:
            Validity, inviter display name when known, decline reason otherwise

        Raises:
            ValidationError: If the invite store could not be consulted
        """
        result = await self.invite_validator.validate(request.code)
        if not result.valid:
            return ResolveInviteResponse(valid=False, reason=result.reason)

        inviter_id = result.invite.inviter_user_id if result.invite else None
        display_name = await self._inviter_display_name(inviter_id)
        return ResolveInviteResponse(valid=True, inviter_display_name=display_name)

    async def _inviter_display_name(self, inviter_id: UserId | None) -> str | None:
        """Best-effort lookup; a failure never invalidates the invite."""
        if inviter_id is None:
            return None

        try:
            inviter = await self.user_service.get_by_id(inviter_id)
        except DomainError as e:
            # Covers a deleted inviter and a failed user lookup
            logfire.warn(
                "Inviter display name unavailable",
                inviter_id=str(inviter_id),
                error=str(e),
            )
            return None

        return inviter.display_name or None
