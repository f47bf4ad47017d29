"""PostgreSQL repository implementations."""

from sitesisters.persistence.repository.invite import PostgresInviteRepository
from sitesisters.persistence.repository.user import PostgresUserRepository

__all__ = [
    "PostgresInviteRepository",
    "PostgresUserRepository",
]
