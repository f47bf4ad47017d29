"""Domain value objects for SiteSisters."""

from sitesisters.domain.value.identifiers import InviteId, UserId
from sitesisters.domain.value.types import (
    ConsumeOutcome,
    DeclineReason,
    InviteCode,
    PendingInviteState,
)

__all__ = [
    # Identifiers
    "UserId",
    "InviteId",
    # Types
    "ConsumeOutcome",
    "DeclineReason",
    "InviteCode",
    "PendingInviteState",
]
