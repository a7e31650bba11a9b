from __future__ import annotations

import json
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from scm.config import settings
from scm.services.identity_provider import AuthIdentity, IdentityProviderError


class SupabaseIdentityProvider:
    def __init__(self) -> None:
        if not settings.supabase_url:
            raise ValueError('SUPABASE_URL is required when IDENTITY_PROVIDER=supabase')
        if not settings.supabase_anon_key:
            raise ValueError('SUPABASE_ANON_KEY is required when IDENTITY_PROVIDER=supabase')

        self.base_url = settings.supabase_url.rstrip('/') + '/auth/v1'
        self.headers = {
            'apikey': settings.supabase_anon_key,
            'Content-Type': 'application/json',
        }

    def _request(self, method: str, path: str, payload: dict | None = None, access_token: str | None = None) -> dict:
        headers = dict(self.headers)
        if access_token:
            headers['Authorization'] = f'Bearer {access_token}'
        data = json.dumps(payload).encode('utf-8') if payload is not None else None
        req = Request(url=f'{self.base_url}{path}', data=data, headers=headers, method=method)
        try:
            with urlopen(req, timeout=settings.supabase_timeout_seconds) as response:
                body = response.read().decode('utf-8')
        except HTTPError as exc:
            body = exc.read().decode('utf-8', errors='ignore') if exc.fp else ''
            raise IdentityProviderError(_error_message(body) or f'Auth error {exc.code} on {path}') from exc
        except URLError as exc:
            raise IdentityProviderError(f'Auth network error on {path}: {exc.reason}') from exc
        return json.loads(body) if body else {}

    def sign_up(self, *, email: str, password: str) -> AuthIdentity:
        parsed = self._request('POST', '/signup', {'email': email, 'password': password})
        # Without email confirmation the user object is returned under "user";
        # with confirmation enabled the body is the user itself.
        user = parsed.get('user') or parsed
        if not user.get('id'):
            raise IdentityProviderError('Register failed, user is null.')
        return AuthIdentity(user_id=user['id'], email=user.get('email') or email, access_token=parsed.get('access_token'))

    def sign_in_with_password(self, *, email: str, password: str) -> AuthIdentity:
        parsed = self._request('POST', '/token?grant_type=password', {'email': email, 'password': password})
        user = parsed.get('user') or {}
        if not user.get('id') or not parsed.get('access_token'):
            raise IdentityProviderError('Login failed: no session returned')
        return AuthIdentity(user_id=user['id'], email=user.get('email') or email, access_token=parsed['access_token'])

    def sign_out(self, *, access_token: str | None) -> None:
        if not access_token:
            return
        self._request('POST', '/logout', access_token=access_token)

    def get_user(self, *, access_token: str) -> AuthIdentity | None:
        try:
            user = self._request('GET', '/user', access_token=access_token)
        except IdentityProviderError:
            return None
        if not user.get('id'):
            return None
        return AuthIdentity(user_id=user['id'], email=user.get('email') or '', access_token=access_token)


def _error_message(body: str) -> str | None:
    try:
        parsed = json.loads(body)
    except ValueError:
        return body.strip() or None
    if not isinstance(parsed, dict):
        return None
    for key in ('msg', 'error_description', 'message', 'error'):
        if parsed.get(key):
            return str(parsed[key])
    return None
