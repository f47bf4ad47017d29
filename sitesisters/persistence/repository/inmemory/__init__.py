"""In-memory repository implementations for testing."""

from .invite import InMemoryInviteRepository
from .user import InMemoryUserRepository

__all__ = [
    "InMemoryInviteRepository",
    "InMemoryUserRepository",
]
