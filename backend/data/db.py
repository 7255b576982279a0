"""SQLite document store for local development and tests"""

import json
import re
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from data.store import TABLES, Store, new_id, utc_now_iso
from utils.errors import StorageError

_FIELD_RE = re.compile(r"^[a-z_][a-z0-9_]*$")


class SQLiteStore(Store):
    """
    Each table is (id, created_at, data) with the row body kept as JSON, so
    rows keep the same nested shape they have in Supabase. Filters go
    through json_extract.
    """

    def __init__(self, db_path: str = "puzzle2profit.db"):
        self.db_path = db_path
        self._ensure_tables_exist()

    def _ensure_tables_exist(self):
        """Ensure all required tables exist (migration-friendly)"""
        with self.get_connection() as conn:
            for table in TABLES:
                conn.execute(f"""
                    CREATE TABLE IF NOT EXISTS {table} (
                        id TEXT PRIMARY KEY,
                        created_at TEXT NOT NULL,
                        data TEXT NOT NULL
                    )
                """)

            # Local stand-in for the auth service: bearer token -> user
            conn.execute("""
                CREATE TABLE IF NOT EXISTS auth_sessions (
                    access_token TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    email TEXT,
                    created_at TEXT NOT NULL
                )
            """)
            conn.commit()

    @contextmanager
    def get_connection(self):
        """Get database connection context manager"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    @staticmethod
    def _check_table(table: str):
        if table not in TABLES:
            raise StorageError(f"Unknown table: {table}")

    @staticmethod
    def _check_field(field: str):
        if not _FIELD_RE.match(field):
            raise StorageError(f"Invalid field name: {field}")

    @staticmethod
    def _row_to_dict(row: sqlite3.Row) -> Dict[str, Any]:
        body = json.loads(row["data"])
        body["id"] = row["id"]
        body["created_at"] = row["created_at"]
        return body

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        self._check_table(table)
        stamped = self._with_defaults(row)
        body = {k: v for k, v in stamped.items() if k not in ("id", "created_at")}

        try:
            with self.get_connection() as conn:
                conn.execute(
                    f"INSERT INTO {table} (id, created_at, data) VALUES (?, ?, ?)",
                    (stamped["id"], stamped["created_at"], json.dumps(body)),
                )
                conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Database error: {e}")

        return stamped

    def select(self, table: str,
               filters: Optional[Dict[str, Any]] = None,
               ids: Optional[List[str]] = None,
               order_by: str = "created_at",
               descending: bool = True,
               limit: Optional[int] = None,
               columns: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        self._check_table(table)
        clauses = []
        params: List[Any] = []

        for field, value in (filters or {}).items():
            self._check_field(field)
            column = field if field in ("id", "created_at") else f"json_extract(data, '$.{field}')"
            if value is None:
                clauses.append(f"{column} IS NULL")
            else:
                clauses.append(f"{column} = ?")
                params.append(value)

        if ids is not None:
            if not ids:
                return []
            clauses.append(f"id IN ({', '.join('?' for _ in ids)})")
            params.extend(ids)

        self._check_field(order_by)
        order_column = order_by if order_by in ("id", "created_at") else f"json_extract(data, '$.{order_by}')"
        direction = "DESC" if descending else "ASC"

        query = f"SELECT id, created_at, data FROM {table}"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += f" ORDER BY {order_column} {direction}, rowid {direction}"
        if limit is not None:
            query += " LIMIT ?"
            params.append(int(limit))

        try:
            with self.get_connection() as conn:
                rows = conn.execute(query, tuple(params)).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Database error: {e}")

        results = [self._row_to_dict(row) for row in rows]
        if columns:
            results = [{c: r.get(c) for c in columns} for r in results]
        return results

    def update(self, table: str, row_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        self._check_table(table)
        current = self.get(table, row_id)
        if current is None:
            return None

        current.update({k: v for k, v in values.items() if k not in ("id", "created_at")})
        body = {k: v for k, v in current.items() if k not in ("id", "created_at")}

        try:
            with self.get_connection() as conn:
                conn.execute(f"UPDATE {table} SET data = ? WHERE id = ?", (json.dumps(body), row_id))
                conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Database error: {e}")

        return current

    def add_session(self, user_id: Optional[str] = None, email: Optional[str] = None,
                    access_token: Optional[str] = None) -> str:
        """Register a bearer token locally; returns the token."""
        token = access_token or new_id()
        with self.get_connection() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO auth_sessions (access_token, user_id, email, created_at) VALUES (?, ?, ?, ?)",
                (token, user_id or new_id(), email, utc_now_iso()),
            )
            conn.commit()
        return token

    def get_user(self, access_token: str) -> Optional[Dict[str, Any]]:
        if not access_token:
            return None
        with self.get_connection() as conn:
            row = conn.execute(
                "SELECT user_id, email FROM auth_sessions WHERE access_token = ?",
                (access_token,),
            ).fetchone()
        if row is None:
            return None
        return {"id": row["user_id"], "email": row["email"]}
