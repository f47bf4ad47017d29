"""Domain services."""

from .base import Service
from .invite_consumer import ConsumeResult, InviteConsumer
from .invite_validator import InviteValidator, ValidationResult
from .jwt_service import JWTService
from .user_service import UserService

__all__ = [
    "ConsumeResult",
    "InviteConsumer",
    "InviteValidator",
    "JWTService",
    "Service",
    "UserService",
    "ValidationResult",
]
