"""Domain model entities for SiteSisters."""

from sitesisters.domain.model.invite import Invite, InviteStatus, InviteUsage
from sitesisters.domain.model.pending_invite import PendingInvite
from sitesisters.domain.model.user import User

__all__ = [
    "Invite",
    "InviteStatus",
    "InviteUsage",
    "PendingInvite",
    "User",
]
