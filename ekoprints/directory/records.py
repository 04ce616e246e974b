"""Mini README: User and order records shared by both screens.

Structure:
    * Role - ``admin`` or ``user``; the only authorisation input.
    * User - identifier, username and role.
    * Sale - an order referenced when linking a task.
    * find_user / username_for - lookups with sentinel fallbacks.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional


class Role(str, Enum):
    """Enumerate the supported roles."""

    ADMIN = "admin"
    USER = "user"

    @classmethod
    def from_str(cls, value: str) -> "Role":
        """Coerce arbitrary casing into a valid role."""

        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as error:
            raise ValueError(f"Unsupported role: {value}") from error


@dataclass(slots=True, frozen=True)
class User:
    user_id: str
    username: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def as_dict(self) -> Dict[str, object]:
        return {"user_id": self.user_id, "username": self.username, "role": self.role.value}


@dataclass(slots=True, frozen=True)
class Sale:
    sale_id: str

    @property
    def reference(self) -> str:
        """Short order reference shown next to linked tasks."""

        return f"#{self.sale_id[:8].upper()}"


def find_user(users: Iterable[User], user_id: str) -> Optional[User]:
    """Return the user with ``user_id`` or ``None`` when it no longer resolves."""

    for user in users:
        if user.user_id == user_id:
            return user
    return None


def username_for(users: Iterable[User], user_id: str, default: str = "Unknown User") -> str:
    """Resolve a display name, degrading to ``default`` on a lookup miss."""

    user = find_user(users, user_id)
    return user.username if user else default
