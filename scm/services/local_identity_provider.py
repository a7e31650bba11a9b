from __future__ import annotations

import hashlib
import hmac

from pwdlib import PasswordHash
from sqlalchemy import select

from scm.config import settings
from scm.db import SessionLocal
from scm.models import AuthUser
from scm.services.identity_provider import AuthIdentity, IdentityProviderError


password_hash = PasswordHash.recommended()


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class LocalIdentityProvider:
    """Development stand-in for the hosted auth service, backed by auth_users."""

    def __init__(self, session_factory=SessionLocal) -> None:
        self.session_factory = session_factory

    def _sign(self, user_id: str) -> str:
        digest = hmac.new(settings.app_secret_key.encode('utf-8'), user_id.encode('utf-8'), hashlib.sha256)
        return f'{user_id}.{digest.hexdigest()}'

    def sign_up(self, *, email: str, password: str) -> AuthIdentity:
        email = _normalize_email(email)
        if not email or not password:
            raise IdentityProviderError('Email and password are required')
        with self.session_factory() as db:
            exists = db.execute(select(AuthUser.id).where(AuthUser.email == email)).scalar_one_or_none()
            if exists:
                raise IdentityProviderError('User already registered')
            user = AuthUser(email=email, password_hash=password_hash.hash(password))
            db.add(user)
            db.flush()
            user_id = user.id
            db.commit()
        return AuthIdentity(user_id=user_id, email=email, access_token=self._sign(user_id))

    def sign_in_with_password(self, *, email: str, password: str) -> AuthIdentity:
        email = _normalize_email(email)
        with self.session_factory() as db:
            user = db.execute(select(AuthUser).where(AuthUser.email == email)).scalar_one_or_none()
            if not user or not password_hash.verify(password, user.password_hash):
                raise IdentityProviderError('Invalid login credentials')
            return AuthIdentity(user_id=user.id, email=user.email, access_token=self._sign(user.id))

    def sign_out(self, *, access_token: str | None) -> None:
        # Tokens are stateless; revoking the web session is enough.
        return None

    def get_user(self, *, access_token: str) -> AuthIdentity | None:
        user_id, _, _signature = access_token.partition('.')
        if not user_id or not hmac.compare_digest(self._sign(user_id), access_token):
            return None
        with self.session_factory() as db:
            user = db.execute(select(AuthUser).where(AuthUser.id == user_id)).scalar_one_or_none()
            if not user:
                return None
            return AuthIdentity(user_id=user.id, email=user.email, access_token=access_token)
