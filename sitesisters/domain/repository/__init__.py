"""Repository interfaces for SiteSisters domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the infrastructure layer.
"""

from sitesisters.domain.repository.invite import InviteRepository
from sitesisters.domain.repository.user import UserRepository

__all__ = [
    "InviteRepository",
    "UserRepository",
]
