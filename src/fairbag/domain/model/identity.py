"""Who is shopping, as reported by the external auth collaborator."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    user_id: str | None = None
    email: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)

    @property
    def display_name(self) -> str:
        if self.email and "@" in self.email:
            local_part = self.email.split("@", 1)[0]
            if local_part:
                return local_part
        return "Customer"

    @staticmethod
    def anonymous() -> Identity:
        return Identity()


class IdentityProvider(ABC):

    @abstractmethod
    def current(self) -> Identity:
        """Return the identity of the active session."""
