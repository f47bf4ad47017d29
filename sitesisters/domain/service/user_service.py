"""User domain service."""

import logfire

from sitesisters.domain.error import NotFoundError
from sitesisters.domain.model import User
from sitesisters.domain.repository import UserRepository
from sitesisters.domain.value import UserId

from .base import Service


class UserService(Service):
    """Domain service for user lookups."""

    def __init__(self, user_repository: UserRepository) -> None:
        """Initialize user service.

        Args:
            user_repository: User repository
        """
        self.user_repository = user_repository

    async def get_by_id(self, user_id: UserId) -> User:
        """Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User entity

        Raises:
            NotFoundError: If user not found
        """
        with logfire.span("user_service.get_by_id", user_id=str(user_id)):
            user = await self.user_repository.find_by_id(user_id)
            if not user:
                logfire.warn("User not found", user_id=str(user_id))
                raise NotFoundError("User", str(user_id))
            logfire.info("User found", user_id=str(user_id))
            return user

    async def save(self, user: User) -> User:
        """Save user.

        Args:
            user: User entity

        Returns:
            Saved user
        """
        with logfire.span("user_service.save", user_id=str(user.id)):
            return await self.user_repository.save(user)
