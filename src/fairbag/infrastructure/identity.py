"""IdentityProvider adapters."""

from __future__ import annotations

from fairbag.domain.model.identity import Identity, IdentityProvider


class StaticIdentityProvider(IdentityProvider):
    """Reports a fixed identity; used by the CLI, which signs in from settings."""

    def __init__(self, identity: Identity) -> None:
        self._identity = identity

    def current(self) -> Identity:
        return self._identity

    @staticmethod
    def from_settings(user_id: str | None, email: str | None) -> StaticIdentityProvider:
        return StaticIdentityProvider(Identity(user_id=user_id or None, email=email or None))
