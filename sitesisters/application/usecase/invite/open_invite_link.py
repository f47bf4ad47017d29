"""Open invite link use case."""

from urllib.parse import quote

import logfire
from pydantic import BaseModel

from sitesisters.application.usecase.base import BaseUseCase
from sitesisters.config import APISettings, InvitationSettings
from sitesisters.domain.model import PendingInvite
from sitesisters.domain.service import InviteValidator
from sitesisters.domain.value import DeclineReason, InviteCode


class OpenInviteLinkRequest(BaseModel):
    """Open invite link request."""

    code: str


class OpenInviteLinkResponse(BaseModel):
    """Open invite link response.

    On success `pending` holds the carrier to hand to the client and
    `redirect_url` points at signup. On a decline only `reason` is set.
    """

    valid: bool
    redirect_url: str | None = None
    pending: PendingInvite | None = None
    reason: DeclineReason | None = None


class OpenInviteLinkUseCase(
    BaseUseCase[OpenInviteLinkRequest, OpenInviteLinkResponse]
):
    """Use case for a visitor opening a shared invite link.

    A valid code is recorded as pending so it survives the trip through
    signup, and the visitor is sent to the signup page.
    """

    def __init__(
        self,
        invite_validator: InviteValidator,
        invitation_settings: InvitationSettings,
        api_settings: APISettings,
    ) -> None:
        """Initialize open invite link use case.

        Args:
            invite_validator: Invite validation service
            invitation_settings: Pending code and signup settings
            api_settings: API settings with the frontend URL
        """
        self.invite_validator = invite_validator
        self.invitation_settings = invitation_settings
        self.api_settings = api_settings

    async def execute(self, request: OpenInviteLinkRequest) -> OpenInviteLinkResponse:
        """Validate the link's code and prepare the signup redirect.

        Args:
            request: Request with the code from the link

        Returns:
            Redirect and pending carrier when valid, decline reason otherwise

        Raises:
            ValidationError: If the invite store could not be consulted
        """
        result = await self.invite_validator.validate(request.code)
        code = InviteCode.parse(request.code)
        if not result.valid or code is None:
            return OpenInviteLinkResponse(valid=False, reason=result.reason)

        pending = PendingInvite.absent().record(
            code,
            self.invite_validator.clock(),
            self.invitation_settings.pending_code_lifetime,
        )
        redirect_url = (
            f"{self.api_settings.frontend_url}{self.invitation_settings.signup_path}"
            f"?invite={quote(code.root, safe='')}"
        )
        logfire.info("Invite link opened", code=code.prefix)
        return OpenInviteLinkResponse(
            valid=True, redirect_url=redirect_url, pending=pending
        )
