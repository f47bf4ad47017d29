"""Application layer DI providers."""

from dishka import Scope, provide

from sitesisters.application.usecase.invite import (
    ConsumeInviteUseCase,
    OpenInviteLinkUseCase,
    ResolveInviteUseCase,
)
from sitesisters.config import APISettings, InvitationSettings
from sitesisters.domain.service import InviteConsumer, InviteValidator, UserService
from sitesisters.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    # Invite use cases
    @provide(scope=Scope.REQUEST)
    def get_resolve_invite_use_case(
        self, invite_validator: InviteValidator, user_service: UserService
    ) -> ResolveInviteUseCase:
        """Provide resolve invite use case."""
        return ResolveInviteUseCase(
            invite_validator=invite_validator, user_service=user_service
        )

    @provide(scope=Scope.REQUEST)
    def get_consume_invite_use_case(
        self, invite_consumer: InviteConsumer
    ) -> ConsumeInviteUseCase:
        """Provide consume invite use case."""
        return ConsumeInviteUseCase(invite_consumer=invite_consumer)

    @provide(scope=Scope.REQUEST)
    def get_open_invite_link_use_case(
        self,
        invite_validator: InviteValidator,
        invitation_settings: InvitationSettings,
        api_settings: APISettings,
    ) -> OpenInviteLinkUseCase:
        """Provide open invite link use case."""
        return OpenInviteLinkUseCase(
            invite_validator=invite_validator,
            invitation_settings=invitation_settings,
            api_settings=api_settings,
        )
