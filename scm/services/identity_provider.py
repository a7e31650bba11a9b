from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class IdentityProviderError(ValueError):
    """Raised with the provider's own message when an identity call fails."""


@dataclass(frozen=True)
class AuthIdentity:
    user_id: str
    email: str
    access_token: str | None = None


class IdentityProvider(Protocol):
    def sign_up(self, *, email: str, password: str) -> AuthIdentity: ...

    def sign_in_with_password(self, *, email: str, password: str) -> AuthIdentity: ...

    def sign_out(self, *, access_token: str | None) -> None: ...

    # Nothing in the portal calls this yet; sessions are trusted once created.
    def get_user(self, *, access_token: str) -> AuthIdentity | None: ...
