"""Schema bootstrap and demo users for local setups (AUTO_INIT_DB / AUTO_SEED_DB, scripts/)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import mysql.connector
from werkzeug.security import generate_password_hash

DEMO_USERS = (
    # first_name, last_name, email, phone, password, role
    ("Admin", "Demo", "admin@example.com", None, "admin123", "ADMIN"),
    ("Sub", "Admin", "subadmin@example.com", None, "subadmin123", "SUBADMIN"),
    ("Member", "Demo", "member@example.com", "+15550000001", "member123", "USER"),
)


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_config(cls, db_config: dict) -> "DBTarget":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "community_events")),
        )

    def connect(self, *, with_database: bool = True):
        kwargs = dict(host=self.host, port=self.port, user=self.user, password=self.password, use_pure=True)
        if with_database:
            kwargs["database"] = self.database
        return mysql.connector.connect(**kwargs)


def split_sql(sql: str) -> Iterator[str]:
    """Yield statements of a SQL script, ignoring ';' inside quoted strings and '--' comments."""
    sql = re.sub(r"(?m)^\s*--.*$", "", sql)
    start = 0
    quote = None
    i = 0
    while i < len(sql):
        ch = sql[i]
        if quote:
            if ch == "\\":
                i += 1
            elif ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = sql[start:i].strip()
            if stmt:
                yield stmt
            start = i + 1
        i += 1

    tail = sql[start:].strip()
    if tail:
        yield tail


def _without_database_statements(sql: str) -> str:
    # The target database comes from DB_CONFIG, not from the script.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    return re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    target = DBTarget.from_config(db_config)

    conn = target.connect(with_database=False)
    try:
        conn.cursor().execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()

    sql = _without_database_statements(Path(schema_path).read_text(encoding="utf-8"))
    conn = target.connect()
    try:
        cur = conn.cursor()
        for stmt in split_sql(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_demo_users(db_config: dict) -> None:
    """Create or reset the demo accounts (matched by email)."""
    conn = DBTarget.from_config(db_config).connect()
    try:
        cur = conn.cursor(dictionary=True)
        for first_name, last_name, email, phone, password, role in DEMO_USERS:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
            if cur.fetchone():
                cur.execute(
                    """
                    UPDATE users
                    SET first_name=%s, last_name=%s, phone=%s, password_hash=%s, role=%s, is_active=1
                    WHERE email=%s
                    """,
                    (first_name, last_name, phone, password_hash, role, email),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO users (first_name, last_name, email, phone, password_hash, role)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    """,
                    (first_name, last_name, email, phone, password_hash, role),
                )
        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = DBTarget.from_config(db_config).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
