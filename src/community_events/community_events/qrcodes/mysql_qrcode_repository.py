from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from ..core.enums import QRCodeType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import QRCode
from .repository import QRCodeRepository

_COLUMNS = "qr_id, event_id, qr_data, type, expires_at, is_active, created_at"


def _to_qrcode(r: Dict[str, Any]) -> QRCode:
    return QRCode(
        qr_id=int(r["qr_id"]),
        event_id=int(r["event_id"]),
        qr_data=r["qr_data"],
        type=QRCodeType(r["type"]),
        expires_at=r["expires_at"],
        is_active=bool(r["is_active"]),
        created_at=r["created_at"],
    )


class MySQLQRCodeRepository(QRCodeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def replace_active(
        self,
        *,
        event_id: int,
        qr_data: str,
        type: QRCodeType,
        expires_at: datetime,
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            # Serialize concurrent issuers of the same event on the event row.
            cur.execute("SELECT event_id FROM events WHERE event_id=%s FOR UPDATE", (int(event_id),))
            fetchone(cur)
            cur.execute(
                "UPDATE qr_codes SET is_active=0 WHERE event_id=%s AND is_active=1",
                (int(event_id),),
            )
            cur.execute(
                """
                INSERT INTO qr_codes(event_id, qr_data, type, expires_at, is_active, created_at)
                VALUES(%s,%s,%s,%s,1,%s)
                """,
                (int(event_id), qr_data, type.value, expires_at, created_at),
            )
            return int(cur.lastrowid)

    def find_active(self, *, event_id: int, qr_data: str) -> Optional[QRCode]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM qr_codes WHERE event_id=%s AND qr_data=%s AND is_active=1",
                (int(event_id), qr_data),
            )
            r = fetchone(cur)
            return _to_qrcode(r) if r else None

    def get_active_for_event(self, event_id: int) -> Optional[QRCode]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM qr_codes
                WHERE event_id=%s AND is_active=1
                ORDER BY created_at DESC
                LIMIT 1
                """,
                (int(event_id),),
            )
            r = fetchone(cur)
            return _to_qrcode(r) if r else None

    def deactivate(self, qr_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE qr_codes SET is_active=0 WHERE qr_id=%s AND is_active=1", (int(qr_id),))
            return cur.rowcount > 0

    def deactivate_expired(self, now: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE qr_codes SET is_active=0 WHERE expires_at < %s AND is_active=1", (now,))
            return int(cur.rowcount)
