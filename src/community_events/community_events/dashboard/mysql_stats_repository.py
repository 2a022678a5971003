from __future__ import annotations

from dataclasses import fields
from datetime import datetime

from ..core.enums import AttendanceStatus, RegistrationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import DashboardStats
from .repository import StatsRepository


class MySQLStatsRepository(StatsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def dashboard_stats(self, *, now: datetime, month_start: datetime) -> DashboardStats:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    (SELECT COUNT(*) FROM users) AS total_users,
                    (SELECT COUNT(*) FROM events) AS total_events,
                    (SELECT COUNT(*) FROM events WHERE start_date > %s) AS upcoming_events,
                    (SELECT COUNT(*) FROM events WHERE end_date < %s) AS past_events,
                    (SELECT COUNT(*) FROM attendances WHERE check_in_time IS NOT NULL) AS total_attendance,
                    (SELECT COUNT(*) FROM attendances WHERE check_in_time >= %s) AS this_month_attendance,
                    (
                        SELECT COUNT(*)
                        FROM event_registrations r JOIN events e ON e.event_id = r.event_id
                        WHERE r.status=%s AND e.start_date > %s
                    ) AS active_registrations
                """,
                (now, now, month_start, RegistrationStatus.CONFIRMED.value, now),
            )
            r = fetchone(cur) or {}
            return DashboardStats(**{f.name: int(r.get(f.name) or 0) for f in fields(DashboardStats)})

    def attendance_counts(self, event_id: int) -> tuple[int, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT status, COUNT(*) AS n
                FROM attendances
                WHERE event_id=%s AND check_in_time IS NOT NULL
                GROUP BY status
                """,
                (int(event_id),),
            )
            counts = {r["status"]: int(r["n"]) for r in fetchall(cur)}
            return (
                counts.get(AttendanceStatus.CHECKED_IN.value, 0),
                counts.get(AttendanceStatus.CHECKED_OUT.value, 0),
            )
