"""Domain entity representing a user role."""

from dataclasses import dataclass


@dataclass
class Role:
    """Role assigned to a user; ``alias`` is the name events target."""

    id: int | None
    name: str
    alias: str


__all__ = ["Role"]
