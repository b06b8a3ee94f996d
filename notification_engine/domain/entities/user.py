"""Domain entity representing a user of the account directory."""

from dataclasses import dataclass
from datetime import datetime

from .role import Role


@dataclass
class User:
    """Attributes the notification engine reads from an account."""

    id: int | None
    role: Role
    name: str
    email: str
    language: str
    is_active: bool
    created_at: datetime | None = None

    def has_role(self, alias: str) -> bool:
        """Return ``True`` when the user's role alias matches ``alias``."""

        return self.role.alias.lower() == alias.lower()

    def is_admin(self) -> bool:
        return self.has_role("admin")


__all__ = ["User"]
