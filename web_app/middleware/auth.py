"""Session cookie middleware."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable

from openly.sessions import AuthResult

SESSION_COOKIE = "session_id"


class SessionAuthMiddleware(BaseHTTPMiddleware):
    """Resolve the session cookie once per request into request.state.auth."""

    async def dispatch(self, request: Request, call_next: Callable):
        sessions = getattr(request.app.state, "sessions", None)
        token = request.cookies.get(SESSION_COOKIE)

        if sessions is None:
            request.state.auth = AuthResult.anonymous()
        else:
            request.state.auth = await sessions.resolve(token)

        return await call_next(request)
