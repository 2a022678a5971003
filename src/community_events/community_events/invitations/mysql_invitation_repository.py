from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..users.contact import Contact, contact_from
from .model import Invitation
from .repository import InvitationRepository

_COLUMNS = """
    invitation_id, email, phone, role, token, invited_by,
    invited_at, expires_at, is_accepted, accepted_at
"""


def _to_invitation(r: Dict[str, Any]) -> Invitation:
    return Invitation(
        invitation_id=int(r["invitation_id"]),
        contact=contact_from(r.get("email"), r.get("phone")),
        role=Role(r["role"]),
        token=r["token"],
        invited_by=int(r["invited_by"]),
        invited_at=r["invited_at"],
        expires_at=r["expires_at"],
        is_accepted=bool(r["is_accepted"]),
        accepted_at=r.get("accepted_at"),
    )


class MySQLInvitationRepository(InvitationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_invitation(
        self,
        *,
        contact: Contact,
        role: Role,
        token: str,
        invited_by: int,
        invited_at: datetime,
        expires_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO invitations(email, phone, role, token, invited_by, invited_at, expires_at, is_accepted)
                VALUES(%s,%s,%s,%s,%s,%s,%s,0)
                """,
                (contact.email, contact.phone, role.value, token, int(invited_by), invited_at, expires_at),
            )
            return int(cur.lastrowid)

    def get_by_id(self, invitation_id: int) -> Optional[Invitation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM invitations WHERE invitation_id=%s", (int(invitation_id),))
            r = fetchone(cur)
            return _to_invitation(r) if r else None

    def get_by_token(self, token: str) -> Optional[Invitation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM invitations
                WHERE token=%s
                ORDER BY is_accepted ASC, invited_at DESC
                LIMIT 1
                """,
                (token,),
            )
            r = fetchone(cur)
            return _to_invitation(r) if r else None

    def find_pending(self, *, email: Optional[str], phone: Optional[str], now: datetime) -> Optional[Invitation]:
        clauses = []
        params: list[object] = []
        if email:
            clauses.append("email=%s")
            params.append(email)
        if phone:
            clauses.append("phone=%s")
            params.append(phone)
        if not clauses:
            return None

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM invitations
                WHERE ({' OR '.join(clauses)}) AND is_accepted=0 AND expires_at > %s
                LIMIT 1
                """,
                (*params, now),
            )
            r = fetchone(cur)
            return _to_invitation(r) if r else None

    def list_invitations(self) -> Sequence[Invitation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM invitations ORDER BY invited_at DESC")
            return [_to_invitation(r) for r in fetchall(cur)]

    def update_token(self, invitation_id: int, token: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE invitations SET token=%s WHERE invitation_id=%s", (token, int(invitation_id)))

    def delete(self, invitation_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM invitations WHERE invitation_id=%s", (int(invitation_id),))
            return cur.rowcount > 0

    def mark_accepted(self, invitation_id: int, accepted_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE invitations SET is_accepted=1, accepted_at=%s WHERE invitation_id=%s AND is_accepted=0",
                (accepted_at, int(invitation_id)),
            )
            return cur.rowcount > 0

    def reopen(self, invitation_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE invitations SET is_accepted=0, accepted_at=NULL WHERE invitation_id=%s",
                (int(invitation_id),),
            )
