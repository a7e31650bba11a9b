from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from sqlalchemy import select

from scm.auth import Principal, Role
from scm.config import settings
from scm.db import SessionLocal
from scm.models import WebSession


AUTH_EXEMPT_PATHS = {'/', '/login', '/robots.txt', '/customer/register', '/employee/register'}
AUTH_EXEMPT_PREFIXES = ('/api/', '/static/')


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _session_expiry() -> datetime:
    return _now() + timedelta(minutes=settings.session_ttl_minutes)


def is_exempt_path(path: str) -> bool:
    return path in AUTH_EXEMPT_PATHS or path.startswith(AUTH_EXEMPT_PREFIXES)


def create_web_session(
    db,
    *,
    user_id: str,
    email: str,
    role: Role,
    provider_access_token: str | None,
    ip: str | None,
    user_agent: str | None,
) -> str:
    token = secrets.token_urlsafe(48)
    db.add(
        WebSession(
            session_token=token,
            user_id=user_id,
            email=email,
            role=role.value,
            provider_access_token=provider_access_token,
            ip=ip,
            user_agent=user_agent,
            expires_at=_session_expiry(),
        )
    )
    db.flush()
    return token


def revoke_web_session(db, token: str) -> WebSession | None:
    web_session = db.execute(select(WebSession).where(WebSession.session_token == token)).scalar_one_or_none()
    if not web_session or web_session.revoked_at is not None:
        return None
    web_session.revoked_at = _now()
    return web_session


def load_principal_from_token(db, token: str | None) -> Principal | None:
    if not token:
        return None

    web_session = db.execute(select(WebSession).where(WebSession.session_token == token)).scalar_one_or_none()
    if not web_session:
        return None

    now = _now()
    if web_session.revoked_at is not None or _aware(web_session.expires_at) <= now:
        return None

    web_session.last_seen_at = now
    web_session.expires_at = _session_expiry()
    return Principal(
        user_id=web_session.user_id,
        email=web_session.email,
        role=Role(web_session.role),
        provider_access_token=web_session.provider_access_token,
    )


def install_auth_session_middleware(app: FastAPI) -> None:
    @app.middleware('http')
    async def auth_session_middleware(request: Request, call_next):
        token = request.cookies.get(settings.session_cookie_name)
        with SessionLocal() as db:
            request.state.principal = load_principal_from_token(db, token)
            db.commit()

        if request.state.principal is None and not is_exempt_path(request.url.path):
            return RedirectResponse('/login', status_code=303)

        return await call_next(request)
