from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from werkzeug.security import generate_password_hash

from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)

# (email, first name, last name, role, password)
DEMO_USERS: Tuple[Tuple[str, str, str, str, str], ...] = (
    ("admin@example.com", "Ada", "Admin", "admin", "admin1234"),
    ("trainer@example.com", "Tom", "Trainer", "trainer", "trainer1234"),
    ("player@example.com", "Pia", "Player", "player", "player1234"),
    ("parent@example.com", "Paul", "Parent", "parent", "parent1234"),
)


def _connection(db_config: dict) -> DatabaseConnection:
    # Fresh factory, not the app singleton: scripts may target another database.
    return DatabaseConnection(DBConfig.from_dict(db_config))


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ';' outside of quoted strings."""
    buf: List[str] = []
    quote: Optional[str] = None
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_script(db_config: dict, path: Path) -> None:
    sql = _strip_comments(_strip_create_db_and_use(Path(path).read_text(encoding="utf-8")))
    conn = _connection(db_config).connect()
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connection(db_config).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    _run_script(db_config, Path(schema_path))


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _run_script(db_config, Path(seed_path))


def ensure_demo_users(db_config: dict) -> None:
    """Upsert one demo account per role and link the demo parent to the demo player."""
    conn = _connection(db_config).connect()
    try:
        cur = conn.cursor(dictionary=True)

        for email, first_name, last_name, role, password in DEMO_USERS:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
            if cur.fetchone():
                cur.execute(
                    """
                    UPDATE users
                    SET first_name=%s, last_name=%s, role=%s, password_hash=%s, active=1
                    WHERE email=%s
                    """,
                    (first_name, last_name, role, password_hash, email),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO users (email, first_name, last_name, role, password_hash)
                    VALUES (%s, %s, %s, %s, %s)
                    """,
                    (email, first_name, last_name, role, password_hash),
                )

        cur.execute(
            """
            INSERT IGNORE INTO parent_players (parent_id, player_id)
            SELECT pa.user_id, pl.user_id FROM users pa, users pl
            WHERE pa.email='parent@example.com' AND pl.email='player@example.com'
            """
        )
        cur.execute(
            """
            UPDATE users pl JOIN users pa ON pa.email='parent@example.com'
            SET pl.parent_id = pa.user_id
            WHERE pl.email='player@example.com'
            """
        )
        conn.commit()
        logger.info("demo users ready (%d accounts)", len(DEMO_USERS))
    finally:
        conn.close()


def list_tables(db_config: dict) -> List[str]:
    conn = _connection(db_config).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
