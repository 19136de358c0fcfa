# Shared FastAPI dependencies for the API layer.
# Created: 2026-10-16

from __future__ import annotations

from fastapi import HTTPException, Request, Response

from pocketdrive.errors import AuthenticationFailed, FileManagerError, UnknownDisk
from pocketdrive.navigation import NavigationController


async def get_controller(
    request: Request,
    response: Response,
    disk: str | None = None,
) -> NavigationController:
    """FastAPI dependency resolving the caller's session into a controller.

    The session id travels in a cookie; a new session is started (and the
    cookie set) when it is missing, unknown, or a different ``disk`` is asked for.
    """
    from pocketdrive.sessions import get_session_manager

    manager = get_session_manager()
    cookie_name = manager.settings.session_cookie
    session_id = request.cookies.get(cookie_name)

    try:
        session = manager.get_or_create(session_id, disk)
    except UnknownDisk as e:
        raise http_error(e) from e

    if session.id != session_id:
        response.set_cookie(cookie_name, session.id, httponly=True, samesite="lax")
    return NavigationController(session)


def http_error(error: FileManagerError) -> HTTPException:
    """Map a file manager error onto an HTTP error; the error code goes in ``X-Error-Code``."""
    # a token failure surfaces as itself, whichever operation triggered it
    if isinstance(error.cause, AuthenticationFailed):
        error = error.cause

    cause = error.cause
    if isinstance(error, UnknownDisk) or isinstance(cause, FileNotFoundError):
        status = 404
    elif isinstance(error, AuthenticationFailed):
        status = 502
    elif isinstance(cause, FileExistsError):
        status = 409
    elif isinstance(cause, PermissionError):
        status = 403
    elif cause is None or isinstance(cause, ValueError):
        status = 400
    else:
        status = 502
    return HTTPException(
        status_code=status,
        detail=str(error),
        headers={"X-Error-Code": error.code},
    )
