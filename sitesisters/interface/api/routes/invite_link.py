"""Invite link route.

This is the URL members share: it validates the code, remembers it in the
pending invite cookie and sends the visitor to signup.
"""

import logging
from html import escape

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, status
from fastapi.responses import HTMLResponse, RedirectResponse

from sitesisters.application.usecase.invite import (
    OpenInviteLinkRequest,
    OpenInviteLinkUseCase,
)
from sitesisters.config import Settings
from sitesisters.domain.error import ValidationError
from sitesisters.domain.value import DeclineReason
from sitesisters.interface.api.pending_invite import write_pending_invite

logger = logging.getLogger(__name__)

router = APIRouter(tags=["invites"], route_class=DishkaRoute)

_INVALID_PAGE = """<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Invite link invalid or expired</title>
</head>
<body>
<main>
<h1>Invite link invalid or expired</h1>
<p>{reason}</p>
<p><a href="{browse_url}">Browse listings</a></p>
<p>Ask your friend for a new invite link, or explore publicly available listings.</p>
</main>
</body>
</html>
"""


def _invalid_page(reason: str, frontend_url: str, status_code: int) -> HTMLResponse:
    return HTMLResponse(
        content=_INVALID_PAGE.format(
            reason=escape(reason), browse_url=escape(f"{frontend_url}/browse")
        ),
        status_code=status_code,
    )


@router.get("/invite/{code}", response_model=None)
async def open_invite_link(
    code: str,
    open_invite_link_use_case: FromDishka[OpenInviteLinkUseCase],
    settings: FromDishka[Settings],
) -> RedirectResponse | HTMLResponse:
    """Open a shared invite link.

    Args:
        code: Invite code from the link
        open_invite_link_use_case: Open invite link use case from DI
        settings: Application settings from DI

    Returns:
        302 redirect to signup with the pending cookie set, or a page
        explaining why the link does not work
    """
    try:
        result = await open_invite_link_use_case.execute(
            OpenInviteLinkRequest(code=code)
        )
    except ValidationError as e:
        logger.error(f"Invite link validation failed for {e.code_prefix}")
        return _invalid_page(
            "Failed to validate invite code.",
            settings.api.frontend_url,
            status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    if not result.valid or result.redirect_url is None or result.pending is None:
        reason = result.reason or DeclineReason.INVALID
        return _invalid_page(
            reason.message, settings.api.frontend_url, status.HTTP_200_OK
        )

    response = RedirectResponse(
        url=result.redirect_url, status_code=status.HTTP_302_FOUND
    )
    write_pending_invite(
        response, result.pending, settings.invitations, secure=settings.is_production
    )
    return response
