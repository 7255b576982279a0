"""Unified storage wrapper - Supabase in production, SQLite document store in dev"""

from functools import lru_cache

from config import config
from data.store import Store


@lru_cache(maxsize=1)
def get_db() -> Store:
    """Get appropriate storage backend based on environment"""
    if config.USE_SUPABASE:
        from data.supabase_store import SupabaseStore
        return SupabaseStore()
    else:
        from data.db import SQLiteStore
        return SQLiteStore(config.SQLITE_PATH)
