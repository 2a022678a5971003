from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role
from .contact import Contact


@dataclass(frozen=True)
class User:
    """Domain entity: a community member.

    Plain data object (no database access code).
    """

    user_id: int
    first_name: str
    last_name: str
    contact: Contact
    password_hash: Optional[str]
    role: Role
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
