"""Domain layer DI providers."""

from dishka import Scope, provide

from sitesisters.config import AuthSettings
from sitesisters.domain.repository import InviteRepository, UserRepository
from sitesisters.domain.service import (
    InviteConsumer,
    InviteValidator,
    JWTService,
    UserService,
)
from sitesisters.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    Each HTTP request gets fresh service instances with their own transaction.
    """

    scope = Scope.REQUEST

    @provide
    def get_jwt_service(self, auth_settings: AuthSettings) -> JWTService:
        """Provide JWT token domain service."""
        return JWTService(auth_settings=auth_settings)

    @provide
    def get_invite_validator(
        self, invite_repository: InviteRepository
    ) -> InviteValidator:
        """Provide invite validation service."""
        return InviteValidator(invite_repository=invite_repository)

    @provide
    def get_invite_consumer(self, invite_repository: InviteRepository) -> InviteConsumer:
        """Provide invite consumption service."""
        return InviteConsumer(invite_repository=invite_repository)

    @provide
    def get_user_service(self, user_repository: UserRepository) -> UserService:
        """Provide user domain service."""
        return UserService(user_repository=user_repository)
