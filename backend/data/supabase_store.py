"""
Supabase Integration
Table access and token verification through the supabase client.
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import AuthError, Client, create_client

from config import config
from data.store import Store
from utils.errors import StorageError
from utils.retry import RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)


def apply_filter(query, field: str, value: Any):
    """Equality filter; NULL and booleans go through `is`."""
    if value is None:
        return query.is_(field, "null")
    if isinstance(value, bool):
        return query.is_(field, "true" if value else "false")
    return query.eq(field, value)


class SupabaseStore(Store):
    """
    Supabase wrapper using the service-role key.

    The service role bypasses row-level security, so this must only run
    server side.
    """

    def __init__(self, url: Optional[str] = None, service_key: Optional[str] = None,
                 client: Optional[Client] = None):
        if client is None:
            url = url or config.SUPABASE_URL
            service_key = service_key or config.SUPABASE_SERVICE_ROLE_KEY
            if not url or not service_key:
                raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required for SupabaseStore")
            client = create_client(url, service_key)
        self.client = client
        self.retry_policy = RetryPolicy(
            max_attempts=config.STORAGE_MAX_RETRIES + 1,
            backoff_seconds=1.0,
            retry_on=(httpx.TransportError,),
        )

    def _execute(self, build: Callable[[], Any], action: str) -> List[Dict[str, Any]]:
        try:
            response = call_with_retry(lambda: build().execute(), self.retry_policy)
        except APIError as e:
            logger.error(f"Supabase {action} failed ({e.code}): {e.message}")
            raise StorageError(f"Database error: {e.message}")
        except httpx.HTTPError as e:
            raise StorageError(f"Database unavailable: {e}")
        return response.data or []

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        return self.insert_many(table, [row])[0]

    def insert_many(self, table: str, rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        payload = list(rows)
        if not payload:
            return []
        return self._execute(lambda: self.client.table(table).insert(payload), f"insert into {table}")

    def select(self, table: str,
               filters: Optional[Dict[str, Any]] = None,
               ids: Optional[List[str]] = None,
               order_by: str = "created_at",
               descending: bool = True,
               limit: Optional[int] = None,
               columns: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        if ids is not None and not ids:
            return []

        def build():
            query = self.client.table(table).select(",".join(columns) if columns else "*")
            for field, value in (filters or {}).items():
                query = apply_filter(query, field, value)
            if ids is not None:
                query = query.in_("id", list(ids))
            query = query.order(order_by, desc=descending)
            if limit is not None:
                query = query.limit(int(limit))
            return query

        return self._execute(build, f"select from {table}")

    def update(self, table: str, row_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        changes = {k: v for k, v in values.items() if k != "created_at"}
        rows = self._execute(
            lambda: self.client.table(table).update(changes).eq("id", row_id),
            f"update {table}",
        )
        return rows[0] if rows else None

    def get_user(self, access_token: str) -> Optional[Dict[str, Any]]:
        if not access_token:
            return None

        try:
            response = self.client.auth.get_user(access_token)
        except AuthError as e:
            logger.warning(f"Token rejected by auth service: {e}")
            return None
        except httpx.HTTPError as e:
            logger.error(f"Auth service unavailable: {e}")
            return None

        user = getattr(response, "user", None)
        if user is None:
            return None
        return {"id": user.id, "email": user.email}
