"""Session token extraction for routes that need a signed-in user."""

from fastapi import Request

from sitesisters.config import AuthSettings

_BEARER_PREFIX = "bearer "


def read_session_token(request: Request, settings: AuthSettings) -> str | None:
    """Session JWT from the auth cookie, or from an Authorization header.

    Args:
        request: Incoming request
        settings: Authentication settings

    Returns:
        Raw token if one was sent, None otherwise
    """
    token = request.cookies.get(settings.auth_cookie_name)
    if token:
        return token

    authorization = request.headers.get("authorization", "")
    if authorization.lower().startswith(_BEARER_PREFIX):
        return authorization[len(_BEARER_PREFIX) :].strip() or None
    return None
