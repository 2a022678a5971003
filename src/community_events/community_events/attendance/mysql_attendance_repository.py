from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from ..registrations.model import ReserveOutcome
from ..registrations.mysql_registration_repository import reserve_slot
from .model import AttendanceRecord, CheckInOutcome
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, event_id, user_id, check_in_time, check_out_time, status, notes"


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        event_id=int(r["event_id"]),
        user_id=int(r["user_id"]),
        check_in_time=r.get("check_in_time"),
        check_out_time=r.get("check_out_time"),
        status=AttendanceStatus(r["status"]),
        notes=r.get("notes"),
    )


def _check_in_row(cur, *, event_id: int, user_id: int, check_in_time: datetime, notes: Optional[str]) -> bool:
    try:
        cur.execute(
            """
            INSERT INTO attendances(event_id, user_id, check_in_time, status, notes)
            VALUES(%s,%s,%s,%s,%s)
            """,
            (int(event_id), int(user_id), check_in_time, AttendanceStatus.CHECKED_IN.value, notes),
        )
        return True
    except IntegrityError as exc:
        if not is_duplicate_key(exc):
            raise

    # A record exists (e.g. created by staff with notes only); claim it while unchecked.
    cur.execute(
        """
        UPDATE attendances
        SET check_in_time=%s, status=%s, notes=COALESCE(%s, notes)
        WHERE event_id=%s AND user_id=%s AND check_in_time IS NULL
        """,
        (check_in_time, AttendanceStatus.CHECKED_IN.value, notes, int(event_id), int(user_id)),
    )
    return cur.rowcount > 0


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, event_id: int, user_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendances WHERE event_id=%s AND user_id=%s",
                (int(event_id), int(user_id)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_event(self, event_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendances
                WHERE event_id=%s
                ORDER BY check_in_time DESC
                """,
                (int(event_id),),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def search(
        self,
        *,
        event_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
        search: Optional[str] = None,
        checked_in_from: Optional[datetime] = None,
        checked_in_to: Optional[datetime] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        clauses = ["1=1"]
        params: list[object] = []

        if event_id is not None:
            clauses.append("a.event_id=%s")
            params.append(int(event_id))
        if status is not None:
            clauses.append("a.status=%s")
            params.append(status.value)
        if search:
            clauses.append("(u.first_name LIKE %s OR u.last_name LIKE %s OR u.email LIKE %s OR u.phone LIKE %s)")
            like = f"%{search}%"
            params.extend([like, like, like, like])
        if checked_in_from is not None:
            clauses.append("a.check_in_time >= %s")
            params.append(checked_in_from)
        if checked_in_to is not None:
            clauses.append("a.check_in_time <= %s")
            params.append(checked_in_to)

        where = " AND ".join(clauses)
        columns = ", ".join(f"a.{c.strip()}" for c in _COLUMNS.split(","))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS total
                FROM attendances a JOIN users u ON u.user_id = a.user_id
                WHERE {where}
                """,
                tuple(params),
            )
            total = int((fetchone(cur) or {}).get("total", 0))
            cur.execute(
                f"""
                SELECT {columns}
                FROM attendances a JOIN users u ON u.user_id = a.user_id
                WHERE {where}
                ORDER BY a.check_in_time DESC, a.attendance_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return [_to_record(r) for r in fetchall(cur)], total

    def record_check_in(
        self,
        *,
        event_id: int,
        user_id: int,
        check_in_time: datetime,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return _check_in_row(cur, event_id=event_id, user_id=user_id, check_in_time=check_in_time, notes=notes)

    def record_check_out(
        self,
        *,
        event_id: int,
        user_id: int,
        check_out_time: datetime,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendances
                SET check_out_time=%s, status=%s, notes=COALESCE(%s, notes)
                WHERE event_id=%s AND user_id=%s
                  AND check_in_time IS NOT NULL AND check_out_time IS NULL
                """,
                (check_out_time, AttendanceStatus.CHECKED_OUT.value, notes, int(event_id), int(user_id)),
            )
            return cur.rowcount > 0

    def register_and_check_in(
        self,
        *,
        event_id: int,
        user_id: int,
        at: datetime,
        notes: Optional[str] = None,
    ) -> CheckInOutcome:
        with db_cursor(self._conn_factory) as (conn, cur):
            # Same lock order as release(): event row, then the registration row.
            cur.execute("SELECT event_id FROM events WHERE event_id=%s FOR UPDATE", (int(event_id),))
            fetchone(cur)
            cur.execute(
                "SELECT event_id FROM event_registrations WHERE event_id=%s AND user_id=%s FOR UPDATE",
                (int(event_id), int(user_id)),
            )
            if fetchone(cur) is None:
                outcome = reserve_slot(conn, cur, event_id=event_id, user_id=user_id, registered_at=at)
                if outcome == ReserveOutcome.CAPACITY_EXCEEDED:
                    return CheckInOutcome.CAPACITY_EXCEEDED
                if outcome == ReserveOutcome.EVENT_NOT_FOUND:
                    return CheckInOutcome.EVENT_NOT_FOUND
                # ALREADY_REGISTERED: a concurrent registration won; reserve_slot rolled back its increment.

            if not _check_in_row(cur, event_id=event_id, user_id=user_id, check_in_time=at, notes=notes):
                conn.rollback()
                return CheckInOutcome.ALREADY_CHECKED_IN
            return CheckInOutcome.CHECKED_IN
