from __future__ import annotations

import secrets

from fastapi import HTTPException, Request, status
from markupsafe import Markup
from starlette.responses import Response

from scm.config import settings


CSRF_COOKIE_NAME = 'csrf_token'
CSRF_FORM_FIELD = 'csrf_token'
SAFE_METHODS = frozenset({'GET', 'HEAD', 'OPTIONS'})


def _store_token(response: Response, token: str) -> None:
    # Readable by the page so forms can echo it back.
    response.set_cookie(
        CSRF_COOKIE_NAME,
        token,
        httponly=False,
        secure=settings.session_cookie_secure,
        samesite='lax',
    )


def install_csrf_cookie_middleware(app) -> None:
    @app.middleware('http')
    async def csrf_cookie_middleware(request: Request, call_next):
        existing = request.cookies.get(CSRF_COOKIE_NAME)
        request.state.csrf_token = existing or secrets.token_urlsafe(24)

        response = await call_next(request)
        if not existing:
            _store_token(response, request.state.csrf_token)
        return response


def csrf_token(request: Request) -> str:
    return getattr(request.state, 'csrf_token', '')


def csrf_input(request: Request) -> Markup:
    """Hidden form field carrying the double-submit token."""
    return Markup('<input type="hidden" name="{}" value="{}">').format(CSRF_FORM_FIELD, csrf_token(request))


async def verify_csrf(request: Request) -> None:
    if request.method in SAFE_METHODS:
        return

    submitted = str((await request.form()).get(CSRF_FORM_FIELD) or '')
    expected = request.cookies.get(CSRF_COOKIE_NAME, '')
    if not (submitted and expected and secrets.compare_digest(submitted, expected)):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail='Invalid CSRF token')
