from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError
from .repository import UserRepository


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    full_name: str
    role: Role


class AuthService:
    """Use case: authenticate a member by email or phone."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, identifier: str, password: str) -> SessionUser:
        identifier = require_non_empty(identifier, "Email or phone")
        if "@" in identifier:
            user = self._users.find_by_email_or_phone(email=identifier.lower())
        else:
            user = self._users.find_by_email_or_phone(phone=identifier)

        if not user or not user.is_active or not user.password_hash:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid credentials")

        return SessionUser(user_id=user.user_id, full_name=user.full_name, role=user.role)

    def get_session_user(self, user_id: int) -> SessionUser:
        user = self._users.get_by_id(int(user_id))
        if not user or not user.is_active:
            raise NotFoundError("User not found")
        return SessionUser(user_id=user.user_id, full_name=user.full_name, role=user.role)
