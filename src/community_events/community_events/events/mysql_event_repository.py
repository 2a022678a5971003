from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence

from ..core.enums import EventCategory
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Event, NewEvent
from .repository import EventRepository

EVENT_COLUMNS = (
    "event_id, title, description, start_date, end_date, location, category, "
    "max_attendees, current_attendees, registration_required, registration_deadline, "
    "is_active, created_by, created_at"
)

_UPDATABLE = {
    "title",
    "description",
    "start_date",
    "end_date",
    "location",
    "category",
    "max_attendees",
    "registration_required",
    "registration_deadline",
    "is_active",
}


def row_to_event(r: Dict[str, Any]) -> Event:
    return Event(
        event_id=int(r["event_id"]),
        title=r["title"],
        description=r.get("description"),
        start_date=r["start_date"],
        end_date=r["end_date"],
        location=r["location"],
        category=EventCategory(r["category"]),
        max_attendees=int(r["max_attendees"]) if r.get("max_attendees") is not None else None,
        current_attendees=int(r.get("current_attendees") or 0),
        registration_required=bool(r.get("registration_required")),
        registration_deadline=r.get("registration_deadline"),
        is_active=bool(r.get("is_active", True)),
        created_by=int(r["created_by"]),
        created_at=r.get("created_at"),
    )


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, event_id: int) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {EVENT_COLUMNS} FROM events WHERE event_id=%s", (int(event_id),))
            r = fetchone(cur)
            return row_to_event(r) if r else None

    def create_event(self, *, data: NewEvent, created_by: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO events(
                    title, description, start_date, end_date, location, category,
                    max_attendees, current_attendees, registration_required,
                    registration_deadline, is_active, created_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,0,%s,%s,%s,%s)
                """,
                (
                    data.title,
                    data.description,
                    data.start_date,
                    data.end_date,
                    data.location,
                    data.category.value,
                    data.max_attendees,
                    int(data.registration_required),
                    data.registration_deadline,
                    int(data.is_active),
                    int(created_by),
                ),
            )
            return int(cur.lastrowid)

    def update_event(self, *, event_id: int, changes: Mapping[str, Any]) -> bool:
        assignments: list[str] = []
        params: list[object] = []
        for column, value in changes.items():
            if column not in _UPDATABLE:
                raise ValueError(f"Column cannot be updated: {column}")
            if isinstance(value, EventCategory):
                value = value.value
            elif isinstance(value, bool):
                value = int(value)
            assignments.append(f"{column}=%s")
            params.append(value)
        if not assignments:
            return True

        where = "event_id=%s"
        params.append(int(event_id))
        # Capacity can never drop below the confirmed registrations already counted.
        if changes.get("max_attendees") is not None:
            where += " AND current_attendees <= %s"
            params.append(int(changes["max_attendees"]))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE events SET {', '.join(assignments)} WHERE {where}", tuple(params))
            return cur.rowcount > 0

    def delete_event(self, event_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM events WHERE event_id=%s", (int(event_id),))
            return cur.rowcount > 0

    def list_events(
        self,
        *,
        category: Optional[EventCategory] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[Sequence[Event], int]:
        clauses = ["1=1"]
        params: list[object] = []

        if category is not None:
            clauses.append("category=%s")
            params.append(category.value)
        if is_active is not None:
            clauses.append("is_active=%s")
            params.append(int(is_active))
        if search:
            clauses.append("(title LIKE %s OR description LIKE %s OR location LIKE %s)")
            like = f"%{search}%"
            params.extend([like, like, like])

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM events WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total", 0))
            cur.execute(
                f"""
                SELECT {EVENT_COLUMNS}
                FROM events
                WHERE {where}
                ORDER BY start_date ASC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return [row_to_event(r) for r in fetchall(cur)], total
