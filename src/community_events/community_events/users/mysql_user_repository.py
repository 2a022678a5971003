from __future__ import annotations

from typing import Any, Dict, Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .contact import Contact, contact_from
from .model import User
from .repository import UserRepository

_USER_COLUMNS = "user_id, first_name, last_name, email, phone, password_hash, role, is_active"


def _to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=int(row["user_id"]),
        first_name=row["first_name"],
        last_name=row["last_name"],
        contact=contact_from(row.get("email"), row.get("phone")),
        password_hash=row.get("password_hash"),
        role=Role(row["role"]),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def find_by_email_or_phone(self, *, email: Optional[str] = None, phone: Optional[str] = None) -> Optional[User]:
        clauses = []
        params: list[object] = []
        if email:
            clauses.append("email=%s")
            params.append(email.lower())
        if phone:
            clauses.append("phone=%s")
            params.append(phone)
        if not clauses:
            return None

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE {' OR '.join(clauses)} LIMIT 1",
                tuple(params),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create_user(
        self,
        *,
        first_name: str,
        last_name: str,
        contact: Contact,
        password_hash: Optional[str],
        role: Role,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(first_name, last_name, email, phone, password_hash, role)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (first_name, last_name, contact.email, contact.phone, password_hash, role.value),
            )
            return int(cur.lastrowid)
