"""Invite use cases."""

from sitesisters.application.usecase.invite.consume_invite import (
    ConsumeInviteRequest,
    ConsumeInviteResponse,
    ConsumeInviteUseCase,
)
from sitesisters.application.usecase.invite.open_invite_link import (
    OpenInviteLinkRequest,
    OpenInviteLinkResponse,
    OpenInviteLinkUseCase,
)
from sitesisters.application.usecase.invite.resolve_invite import (
    ResolveInviteRequest,
    ResolveInviteResponse,
    ResolveInviteUseCase,
)

__all__ = [
    "ConsumeInviteRequest",
    "ConsumeInviteResponse",
    "ConsumeInviteUseCase",
    "OpenInviteLinkRequest",
    "OpenInviteLinkResponse",
    "OpenInviteLinkUseCase",
    "ResolveInviteRequest",
    "ResolveInviteResponse",
    "ResolveInviteUseCase",
]
