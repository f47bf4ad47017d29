"""Cookie transport for the pending invite carrier.

The code cookie is readable by the signup page's scripts, so it is
deliberately not HttpOnly. Its expiry travels in a companion cookie so the
server can enforce the carrier's lifetime; browsers also drop both cookies
once their max-age passes.
"""

from datetime import datetime, timezone

from fastapi import Request, Response

from sitesisters.config import InvitationSettings
from sitesisters.domain.model import PendingInvite
from sitesisters.domain.value import PendingInviteState


def write_pending_invite(
    response: Response,
    pending: PendingInvite,
    settings: InvitationSettings,
    secure: bool,
) -> None:
    """Write the carrier's state to the response.

    PENDING sets the cookies, CLEARED deletes them and ABSENT leaves the
    client untouched.

    Args:
        response: Outgoing response
        pending: Carrier to hand to the client
        settings: Invitation settings (cookie names and lifetime)
        secure: Whether to restrict the cookies to HTTPS
    """
    names = (
        settings.pending_code_cookie_name,
        settings.pending_code_expiry_cookie_name,
    )

    if pending.state == PendingInviteState.PENDING:
        if pending.code is None or pending.expires_at is None:
            raise ValueError("Pending carrier needs a code and an expiry")
        values = (pending.code.root, str(int(pending.expires_at.timestamp())))
        for name, value in zip(names, values):
            response.set_cookie(
                key=name,
                value=value,
                max_age=int(settings.pending_code_lifetime.total_seconds()),
                path="/",
                secure=secure,
                httponly=False,
                samesite="lax",
            )
    elif pending.state == PendingInviteState.CLEARED:
        for name in names:
            response.delete_cookie(
                key=name, path="/", secure=secure, httponly=False, samesite="lax"
            )


def read_pending_invite(
    request: Request, settings: InvitationSettings
) -> tuple[str | None, datetime | None]:
    """Raw pending code and its recorded expiry, as sent back by the client.

    Returns:
        The code cookie (None if missing) and the expiry (None if missing
        or unreadable)
    """
    raw_code = request.cookies.get(settings.pending_code_cookie_name)
    raw_expiry = request.cookies.get(settings.pending_code_expiry_cookie_name)
    try:
        expires_at = (
            datetime.fromtimestamp(int(raw_expiry), tz=timezone.utc)
            if raw_expiry
            else None
        )
    except (ValueError, OverflowError, OSError):
        expires_at = None
    return raw_code, expires_at
