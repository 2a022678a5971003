from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import RegistrationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import Registration, ReserveOutcome
from .repository import RegistrationRepository


def _to_registration(r: Dict[str, Any]) -> Registration:
    return Registration(
        event_id=int(r["event_id"]),
        user_id=int(r["user_id"]),
        status=RegistrationStatus(r["status"]),
        registration_date=r["registration_date"],
    )


def reserve_slot(conn, cur, *, event_id: int, user_id: int, registered_at: datetime) -> ReserveOutcome:
    """Claim one capacity slot inside the caller's transaction.

    The conditional UPDATE takes the event row lock first, so registrations for
    the same event are serialized and the counter can never pass max_attendees.
    On any non-RESERVED outcome the transaction is rolled back.
    """
    cur.execute(
        """
        UPDATE events
        SET current_attendees = current_attendees + 1
        WHERE event_id=%s AND (max_attendees IS NULL OR current_attendees < max_attendees)
        """,
        (int(event_id),),
    )
    if cur.rowcount == 0:
        cur.execute("SELECT event_id FROM events WHERE event_id=%s", (int(event_id),))
        exists = fetchone(cur) is not None
        conn.rollback()
        return ReserveOutcome.CAPACITY_EXCEEDED if exists else ReserveOutcome.EVENT_NOT_FOUND

    try:
        cur.execute(
            """
            INSERT INTO event_registrations(event_id, user_id, status, registration_date)
            VALUES(%s,%s,%s,%s)
            """,
            (int(event_id), int(user_id), RegistrationStatus.CONFIRMED.value, registered_at),
        )
    except IntegrityError as exc:
        if not is_duplicate_key(exc):
            raise
        conn.rollback()
        return ReserveOutcome.ALREADY_REGISTERED
    return ReserveOutcome.RESERVED


class MySQLRegistrationRepository(RegistrationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, event_id: int, user_id: int) -> Optional[Registration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT event_id, user_id, status, registration_date
                FROM event_registrations
                WHERE event_id=%s AND user_id=%s
                """,
                (int(event_id), int(user_id)),
            )
            r = fetchone(cur)
            return _to_registration(r) if r else None

    def list_for_user(self, user_id: int) -> Sequence[Registration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT event_id, user_id, status, registration_date
                FROM event_registrations
                WHERE user_id=%s
                ORDER BY registration_date DESC
                """,
                (int(user_id),),
            )
            return [_to_registration(r) for r in fetchall(cur)]

    def reserve(self, *, event_id: int, user_id: int, registered_at: datetime) -> ReserveOutcome:
        with db_cursor(self._conn_factory) as (conn, cur):
            return reserve_slot(conn, cur, event_id=event_id, user_id=user_id, registered_at=registered_at)

    def release(self, *, event_id: int, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT event_id FROM events WHERE event_id=%s FOR UPDATE", (int(event_id),))
            fetchone(cur)
            cur.execute(
                "DELETE FROM event_registrations WHERE event_id=%s AND user_id=%s",
                (int(event_id), int(user_id)),
            )
            if cur.rowcount == 0:
                return False
            cur.execute(
                """
                UPDATE events
                SET current_attendees = current_attendees - 1
                WHERE event_id=%s AND current_attendees > 0
                """,
                (int(event_id),),
            )
            return True
