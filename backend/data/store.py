"""Storage interface shared by the Supabase and SQLite backends"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

# Tables the pipeline reads and writes
TABLES = (
    "paths",
    "trends",
    "tech_stacks",
    "affiliate_contracts",
    "affiliate_monitoring_alerts",
)


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Store:
    """
    Table-like persistence with the handful of primitives the pipeline uses.

    Rows are plain dicts. `insert` assigns `id` and `created_at` when the
    caller leaves them out; `created_at` is never changed afterwards.
    """

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    def insert_many(self, table: str, rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [self.insert(table, row) for row in rows]

    def select(self, table: str,
               filters: Optional[Dict[str, Any]] = None,
               ids: Optional[List[str]] = None,
               order_by: str = "created_at",
               descending: bool = True,
               limit: Optional[int] = None,
               columns: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        """Rows matching every equality filter (and `id IN ids` when given)."""
        raise NotImplementedError

    def update(self, table: str, row_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply `values` to one row; returns the updated row or None if absent."""
        raise NotImplementedError

    def get_user(self, access_token: str) -> Optional[Dict[str, Any]]:
        """Resolve a bearer token to a user, or None when it is not a live session."""
        raise NotImplementedError

    def get(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        rows = self.select(table, filters={"id": row_id}, limit=1)
        return rows[0] if rows else None

    def find_one(self, table: str, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        rows = self.select(table, filters=filters, limit=1)
        return rows[0] if rows else None

    @staticmethod
    def _with_defaults(row: Dict[str, Any]) -> Dict[str, Any]:
        stamped = dict(row)
        stamped.setdefault("id", new_id())
        stamped.setdefault("created_at", utc_now_iso())
        return stamped
