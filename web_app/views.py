"""Jinja2 view helpers shared by routers and error handlers."""

import os

from fastapi import Request
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from openly.sessions import AuthResult

template_dir = os.path.join(os.path.dirname(__file__), "..", "ux", "web")
templates = Jinja2Templates(directory=template_dir)


def current_auth(request: Request) -> AuthResult:
    """Authentication result set by SessionAuthMiddleware (anonymous if unset)."""
    return getattr(request.state, "auth", None) or AuthResult.anonymous()


def render(request: Request, name: str, context: dict = None, status_code: int = 200) -> Response:
    """Render a template from ux/web."""
    context = dict(context or {})
    context.setdefault("auth", current_auth(request))
    return templates.TemplateResponse(request, name, context, status_code=status_code)


def render_not_found(request: Request) -> Response:
    """Generic not-found page, also used for unauthorized access."""
    return render(request, "404.html", status_code=404)


def render_internal_error(request: Request) -> Response:
    """Generic internal error page with no detail."""
    return render(request, "500.html", status_code=500)
