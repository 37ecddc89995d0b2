# core/supabase_client.py

from threading import Lock
from typing import Dict, Optional

from supabase import create_client, Client
from supabase.client import ClientOptions
from supabase_auth import SyncSupportedStorage

from core.config import settings
from core.errors import StorageError
from core.logging_config import logger


# ============================================================
# Service-role client (server side, shared, stateless)
# ============================================================
_service_client: Optional[Client] = None
_service_lock = Lock()


def get_supabase_client() -> Client:
    """
    Returns the process-wide Supabase client built with the SERVICE ROLE KEY.

    Used by the privileged API to resolve bearer tokens and to read role
    tables regardless of RLS. It never persists or refreshes a session,
    so sharing it across requests leaks no per-user state.
    """
    global _service_client

    if _service_client is not None:
        return _service_client

    with _service_lock:
        if _service_client is None:
            supabase_url = settings.SUPABASE_URL
            supabase_key = settings.SUPABASE_SERVICE_ROLE_KEY

            if not supabase_url or not supabase_key:
                logger.error("Missing Supabase credentials")
                logger.error(f"   URL: {supabase_url}")
                logger.error(f"   SERVICE ROLE KEY: {'SET' if supabase_key else 'MISSING'}")
                raise StorageError("Supabase client not configured")

            options = ClientOptions(
                auto_refresh_token=False,
                persist_session=False,
            )
            _service_client = create_client(supabase_url, supabase_key, options)
            logger.info("Supabase service client initialized")

    return _service_client


# ============================================================
# Per-role session storage
# ============================================================
class MemoryStore:
    """
    Backing key/value store shared by every role in one client runtime
    (the server-side stand-in for a browser's localStorage).
    """

    def __init__(self):
        self._items: Dict[str, str] = {}
        self._lock = Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._items)


# Key the auth client stores its session under (plus the PKCE verifier)
AUTH_SESSION_KEY = "supabase.auth.token"
AUTH_VERIFIER_KEY = f"{AUTH_SESSION_KEY}-code-verifier"


class NamespacedStorage(SyncSupportedStorage):
    """
    Auth storage adapter handed to the Supabase auth client.

    Every key is prefixed with the role's storage key, so the user, admin
    and staff sessions can live in the same MemoryStore without one
    role's sign-out removing another role's tokens.
    """

    def __init__(self, namespace: str, store: Optional[MemoryStore] = None):
        self.namespace = namespace
        self.store = store if store is not None else MemoryStore()

    def _key(self, key: str) -> str:
        return f"{self.namespace}/{key}"

    def get_item(self, key: str) -> Optional[str]:
        return self.store.get(self._key(key))

    def set_item(self, key: str, value: str) -> None:
        self.store.set(self._key(key), value)

    def remove_item(self, key: str) -> None:
        self.store.delete(self._key(key))

    def clear_session(self) -> None:
        """Drop this role's stored session without touching the provider."""
        self.remove_item(AUTH_SESSION_KEY)
        self.remove_item(AUTH_VERIFIER_KEY)


def create_role_client(
    storage: NamespacedStorage,
    *,
    persist_session: bool = True,
    auto_refresh_token: bool = True,
) -> Client:
    """
    Creates an ANON-key client whose auth session lives in `storage`.
    One of these backs each SessionManager; they only share the project
    URL and key, never session state.
    """
    if not settings.SUPABASE_URL or not settings.SUPABASE_ANON_KEY:
        logger.error("Missing Supabase anon credentials")
        raise StorageError("Supabase client not configured")

    options = ClientOptions(
        storage=storage,
        persist_session=persist_session,
        auto_refresh_token=auto_refresh_token,
    )
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY, options)


# ============================================================
# Ping Supabase for health checks
# ============================================================
HEALTH_TABLES = ["properties", "staff_tasks", "user_profiles"]


def ping_supabase() -> dict:
    """
    Simple connectivity check.
    Does NOT query auth tables or role tables.
    """
    try:
        client = get_supabase_client()
    except StorageError:
        return {"service": "Supabase", "status": "not_configured"}

    results = {}
    status = "ok"

    for t in HEALTH_TABLES:
        try:
            res = client.table(t).select("id").limit(1).execute()
            results[t] = {
                "status": "ok",
                "rows_found": len(res.data or []),
            }
        except Exception as err:
            logger.error(f"Supabase ping failed for {t}: {err}")
            results[t] = {"status": "error"}
            status = "degraded"

    return {
        "service": "Supabase",
        "status": status,
        "tables": results,
    }
