from __future__ import annotations

from typing import Optional, Protocol

from ..core.enums import Role
from .contact import Contact
from .model import User


class UserRepository(Protocol):
    """Repository interface for the identity store.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def find_by_email_or_phone(self, *, email: Optional[str] = None, phone: Optional[str] = None) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        first_name: str,
        last_name: str,
        contact: Contact,
        password_hash: Optional[str],
        role: Role,
    ) -> int:
        raise NotImplementedError
