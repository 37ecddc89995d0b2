# core/supabase_helpers.py

from typing import Optional

from supabase import Client

from core.errors import handle_supabase_error
from core.utils import sanitize


# =================================================================
#  SAFE SELECT / INSERT / UPDATE / DELETE
# =================================================================
# Thin wrappers around PostgREST calls that turn client exceptions
# into domain errors (StorageError / ValidationError).
# They take the client explicitly: the service-role client on the
# privileged path, a role client on the session path.
# =================================================================

def fetch_one(client: Client, table: str, filters: dict, *, columns: str = "*") -> Optional[dict]:
    """
    SELECT a single row or None.
    Uses limit(1) rather than maybe_single() so "no rows" is never an error.
    """
    try:
        query = client.table(table).select(columns)
        for key, val in filters.items():
            query = query.eq(key, val)
        result = query.limit(1).execute()
        return result.data[0] if result.data else None

    except Exception as e:
        raise handle_supabase_error(e, f"Failed to fetch from {table}") from e


def safe_insert(client: Client, table: str, data: dict) -> Optional[dict]:
    """INSERT one row and return its representation."""
    try:
        result = client.table(table).insert(sanitize(data)).execute()
        return result.data[0] if result.data else None

    except Exception as e:
        raise handle_supabase_error(e, f"Failed to insert into {table}") from e


def safe_update(client: Client, table: str, filters: dict, data: dict) -> Optional[dict]:
    """
    UPDATE rows matching ALL equality filters in one statement.
    Returns the first updated row, or None when nothing matched.
    """
    try:
        query = client.table(table).update(sanitize(data))
        for key, val in filters.items():
            query = query.eq(key, val)
        result = query.execute()
        return result.data[0] if result.data else None

    except Exception as e:
        raise handle_supabase_error(e, f"Failed to update {table}") from e


def safe_delete(client: Client, table: str, filters: dict) -> list:
    """DELETE rows matching equality filters; returns the deleted rows."""
    try:
        query = client.table(table).delete()
        for key, val in filters.items():
            query = query.eq(key, val)
        result = query.execute()
        return result.data or []

    except Exception as e:
        raise handle_supabase_error(e, f"Failed to delete from {table}") from e
