"""Session gate: redirects between the login pages and the todo pages based on session presence."""

from typing import cast

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from todoapp.app import App
from todoapp.core.backend import CookieStorage

logger = structlog.get_logger(__name__)

PROTECTED_PREFIX = "/todos"
AUTH_PAGES = frozenset({"/login", "/register"})
LOGIN_PATH = "/login"
HOME_PATH = "/todos"


def is_protected(path: str) -> bool:
    return path == PROTECTED_PREFIX or path.startswith(f"{PROTECTED_PREFIX}/")


def is_gated(path: str) -> bool:
    """Whether the session gate runs for this path at all."""
    return is_protected(path) or path in AUTH_PAGES


def gate_redirect(path: str, has_session: bool) -> str | None:
    """Return the redirect target for a gated path, or None to let the request through."""
    if is_protected(path) and not has_session:
        return LOGIN_PATH
    if path in AUTH_PAGES and has_session:
        return HOME_PATH
    return None


class SessionGateMiddleware(BaseHTTPMiddleware):
    """Checks the session on gated paths before routing.

    Cookies rewritten while restoring the session (token refresh, stale session
    removal) or by the route itself (sign-in) are copied onto whatever response
    goes out, redirect or not.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if not is_gated(path):
            return await call_next(request)

        app = cast(App, request.app.state.app)
        cookie_sink = Response()
        storage = CookieStorage(request.cookies, cookie_sink, secure=app.config.cookie_secure)
        services = await app.connect(storage)
        request.state.services = services

        target = gate_redirect(path, services.auth.has_session)
        if target is None:
            response = await call_next(request)
        else:
            logger.info("session_gate_redirect", path=path, target=target)
            response = RedirectResponse(request.url.replace(path=target, query=""), status_code=307)

        for cookie in cookie_sink.headers.getlist("set-cookie"):
            response.headers.append("set-cookie", cookie)
        return response
