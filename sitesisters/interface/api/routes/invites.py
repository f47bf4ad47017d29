"""Invite routes."""

import logging

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from sitesisters.application.usecase.invite import (
    ConsumeInviteRequest,
    ConsumeInviteUseCase,
    ResolveInviteRequest,
    ResolveInviteUseCase,
)
from sitesisters.config import Settings
from sitesisters.domain.error import (
    ConsumeError,
    UnauthenticatedError,
    ValidationError,
)
from sitesisters.domain.service import JWTService
from sitesisters.domain.value import DeclineReason
from sitesisters.interface.api.pending_invite import (
    read_pending_invite,
    write_pending_invite,
)
from sitesisters.interface.api.session import read_session_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invites", tags=["invites"], route_class=DishkaRoute)

UNAUTHORIZED_MESSAGE = "Unauthorized. Please sign in."
INVALID_BODY_MESSAGE = "Invalid request body."
VALIDATE_FAILED_MESSAGE = "Failed to validate invite code."
CONSUME_FAILED_MESSAGE = "Failed to consume invite."


class ResolveInviteAPIResponse(BaseModel):
    """API response for resolving an invite code.

    Valid codes carry `inviter_display_name` (possibly null); declined codes
    carry `reason`.
    """

    valid: bool
    inviter_display_name: str | None = None
    reason: str | None = None


class ConsumeInviteAPIResponse(BaseModel):
    """API response for consuming an invite code."""

    ok: bool
    reason: str | None = None


def _resolve_reply(status_code: int, body: ResolveInviteAPIResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=body.model_dump(exclude_unset=True)
    )


def _consume_reply(status_code: int, body: ConsumeInviteAPIResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=body.model_dump(exclude_unset=True)
    )


@router.get(
    "/resolve",
    response_model=ResolveInviteAPIResponse,
    responses={
        400: {"model": ResolveInviteAPIResponse},
        500: {"model": ResolveInviteAPIResponse},
    },
)
async def resolve_invite(
    resolve_invite_use_case: FromDishka[ResolveInviteUseCase],
    code: str | None = Query(default=None),
) -> JSONResponse:
    """Check an invite code before signup.

    No authentication required. The inviter's ID is never returned.

    Args:
        resolve_invite_use_case: Resolve invite use case from DI
        code: Invite code from the query string

    Returns:
        Validity and inviter display name, or the decline reason
    """
    try:
        result = await resolve_invite_use_case.execute(ResolveInviteRequest(code=code))
    except ValidationError as e:
        logger.error(f"Invite validation failed for {e.code_prefix}")
        return _resolve_reply(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ResolveInviteAPIResponse(valid=False, reason=VALIDATE_FAILED_MESSAGE),
        )

    if result.valid:
        return _resolve_reply(
            status.HTTP_200_OK,
            ResolveInviteAPIResponse(
                valid=True, inviter_display_name=result.inviter_display_name
            ),
        )

    reason = result.reason or DeclineReason.INVALID
    status_code = (
        status.HTTP_400_BAD_REQUEST
        if reason == DeclineReason.NO_CODE
        else status.HTTP_200_OK
    )
    return _resolve_reply(
        status_code, ResolveInviteAPIResponse(valid=False, reason=reason.message)
    )


@router.post(
    "/consume",
    response_model=ConsumeInviteAPIResponse,
    responses={
        400: {"model": ConsumeInviteAPIResponse},
        401: {"model": ConsumeInviteAPIResponse},
        500: {"model": ConsumeInviteAPIResponse},
    },
)
async def consume_invite(
    request: Request,
    consume_invite_use_case: FromDishka[ConsumeInviteUseCase],
    jwt_service: FromDishka[JWTService],
    settings: FromDishka[Settings],
) -> JSONResponse:
    """Use an invite code for the signed-in user.

    Body: `{"code": "<code>"}`. When `code` is omitted, the pending invite
    set by the invite link is used instead, unless it has expired. The
    carrier is cleared once it was submitted or found expired; server
    errors leave it in place for a retry.

    Args:
        request: Incoming request (session token, body, pending cookie)
        consume_invite_use_case: Consume invite use case from DI
        jwt_service: JWT service from DI
        settings: Application settings from DI

    Returns:
        `{"ok": true}` or `{"ok": false, "reason": ...}`
    """
    user_id = jwt_service.get_user_id_from_token(
        read_session_token(request, settings.auth)
    )
    if user_id is None:
        return _consume_reply(
            status.HTTP_401_UNAUTHORIZED,
            ConsumeInviteAPIResponse(ok=False, reason=UNAUTHORIZED_MESSAGE),
        )

    try:
        body = await request.json()
    except ValueError:
        body = None
    code = body.get("code") if isinstance(body, dict) else None
    if not isinstance(body, dict) or not isinstance(code, (str, type(None))):
        return _consume_reply(
            status.HTTP_400_BAD_REQUEST,
            ConsumeInviteAPIResponse(ok=False, reason=INVALID_BODY_MESSAGE),
        )

    pending_code, pending_expires_at = read_pending_invite(
        request, settings.invitations
    )
    try:
        result = await consume_invite_use_case.execute(
            ConsumeInviteRequest(
                user_id=user_id,
                code=code,
                pending_code=pending_code,
                pending_expires_at=pending_expires_at,
            )
        )
    except UnauthenticatedError:
        return _consume_reply(
            status.HTTP_401_UNAUTHORIZED,
            ConsumeInviteAPIResponse(ok=False, reason=UNAUTHORIZED_MESSAGE),
        )
    except ConsumeError as e:
        logger.error(f"Invite consume failed for {e.code_prefix}")
        return _consume_reply(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ConsumeInviteAPIResponse(ok=False, reason=CONSUME_FAILED_MESSAGE),
        )

    if result.reason == DeclineReason.NO_CODE:
        # Only an expired carrier can be left to clear here
        response = _consume_reply(
            status.HTTP_400_BAD_REQUEST,
            ConsumeInviteAPIResponse(ok=False, reason=DeclineReason.NO_CODE.message),
        )
    elif result.ok:
        response = _consume_reply(status.HTTP_200_OK, ConsumeInviteAPIResponse(ok=True))
    else:
        reason = result.reason or DeclineReason.INVALID
        response = _consume_reply(
            status.HTTP_200_OK,
            ConsumeInviteAPIResponse(ok=False, reason=reason.message),
        )

    write_pending_invite(
        response, result.pending, settings.invitations, secure=settings.is_production
    )
    return response
