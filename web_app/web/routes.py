"""HTML routes: landing page, admin session and short link redirects."""

import re

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from openly.common.logging_config import get_logger
from openly.common.urls import build_base_url, build_short_url
from openly.sessions import AuthResult
from ..middleware.auth import SESSION_COOKIE
from ..views import current_auth, render, render_not_found

router = APIRouter()
logger = get_logger("web")

# Plain ASCII digits; int() alone also takes "+1", " 1" and "1_0"
LINK_ID_PATTERN = re.compile(r"[0-9]+", re.ASCII)
# Digits in the largest SQLite INTEGER
MAX_LINK_ID_DIGITS = 19


def _base_url(request: Request) -> str:
    return build_base_url(
        headers=request.headers,
        request_scheme=request.url.scheme,
        request_host=request.headers.get("host"),
    )


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def homepage(request: Request):
    """Landing page."""
    return render(request, "index.html")


@router.get("/loginadmin", response_class=HTMLResponse, include_in_schema=False)
async def login_form(request: Request):
    """Admin login form."""
    return render(request, "login.html")


@router.post("/loginadmin", include_in_schema=False)
async def login(request: Request, password: str = Form("")):
    """Check the admin password and open a session.

    Success sets the session cookie and goes to /admin; a wrong password
    goes back to the form without any detail.
    """
    sessions = request.app.state.sessions

    issued = await sessions.authenticate(password)
    if issued is None:
        return RedirectResponse(url="/loginadmin", status_code=status.HTTP_303_SEE_OTHER)

    response = RedirectResponse(url="/admin", status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        key=SESSION_COOKIE,
        value=issued.token,
        expires=issued.expires_at,
        httponly=True,
        samesite="lax",
    )
    return response


@router.get("/logout", include_in_schema=False)
async def logout(request: Request):
    """Revoke the current session and clear the cookie, whether or not it existed."""
    sessions = request.app.state.sessions

    await sessions.revoke(request.cookies.get(SESSION_COOKIE))

    response = RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)
    response.delete_cookie(key=SESSION_COOKIE, httponly=True, samesite="lax")
    return response


@router.get("/admin", response_class=HTMLResponse, include_in_schema=False)
async def admin(request: Request, auth: AuthResult = Depends(current_auth)):
    """List every link."""
    if not auth.authenticated:
        logger.info("Admin login required")
        return render_not_found(request)

    service = request.app.state.service
    links = await service.list(auth)

    base_url = _base_url(request)
    rows = [
        {**link.to_dict(), "short_url": build_short_url(link.short_id, base_url)}
        for link in links
    ]
    return render(request, "admin.html", {"links": rows})


@router.get("/new", response_class=HTMLResponse, include_in_schema=False)
async def new_link_form(request: Request, auth: AuthResult = Depends(current_auth)):
    """Link creation form (submits to /shorten)."""
    if not auth.authenticated:
        return render_not_found(request)
    return render(request, "new.html")


@router.get("/delete/{link_id}", include_in_schema=False)
async def delete_link(request: Request, link_id: str, auth: AuthResult = Depends(current_auth)):
    """Delete a link by numeric id and return to /admin."""
    if not auth.authenticated:
        logger.info("Admin login required")
        return render_not_found(request)

    if not LINK_ID_PATTERN.fullmatch(link_id):
        logger.info(f"Ignoring delete of non-numeric id {link_id!r}")
    elif len(link_id.lstrip("0")) > MAX_LINK_ID_DIGITS:
        logger.info(f"Ignoring delete of out-of-range id {link_id[:32]}...")
    else:
        await request.app.state.service.delete(int(link_id), auth)

    return RedirectResponse(url="/admin", status_code=status.HTTP_302_FOUND)


@router.get("/{short_id}", include_in_schema=False)
async def redirect_to_url(request: Request, short_id: str):
    """Redirect to the long URL behind short_id."""
    service = request.app.state.service

    long_url = await service.resolve(short_id)
    if long_url is None:
        return render_not_found(request)

    return RedirectResponse(url=long_url, status_code=status.HTTP_302_FOUND)
