# core/rate_limiter.py

from threading import Lock
from typing import Dict, Optional, Tuple
import time

from fastapi import HTTPException, Request

from core.logging_config import logger


# In-memory sliding window, per process.
# Each entry is (timestamps, window_seconds); idle entries are swept.
_rate_limit_store: Dict[str, Tuple[list, int]] = {}
_store_lock = Lock()

SWEEP_INTERVAL_SECONDS = 60
_last_sweep = 0.0


def _sweep(now: float) -> None:
    """Drop identifiers with no request left inside their window. Caller holds the lock."""
    global _last_sweep

    if now - _last_sweep < SWEEP_INTERVAL_SECONDS:
        return
    _last_sweep = now

    stale = [
        key for key, (timestamps, window) in _rate_limit_store.items()
        if not timestamps or timestamps[-1] <= now - window
    ]
    for key in stale:
        del _rate_limit_store[key]


def check_rate_limit(
    identifier: str,
    max_requests: int = 10,
    window_seconds: int = 60,
) -> Tuple[bool, int]:
    """
    Record one request for `identifier` and report whether it is allowed.

    Returns:
        Tuple of (allowed: bool, remaining: int)
    """
    now = time.time()
    window_start = now - window_seconds

    with _store_lock:
        _sweep(now)

        timestamps, _ = _rate_limit_store.get(identifier, ([], window_seconds))
        requests = [ts for ts in timestamps if ts > window_start]

        if len(requests) >= max_requests:
            _rate_limit_store[identifier] = (requests, window_seconds)
            return False, 0

        requests.append(now)
        _rate_limit_store[identifier] = (requests, window_seconds)
        return True, max_requests - len(requests)


def reset_rate_limits() -> None:
    global _last_sweep

    with _store_lock:
        _rate_limit_store.clear()
        _last_sweep = 0.0


def get_client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # First hop is the original client
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def get_rate_limit_identifier(request: Request, key: Optional[str] = None, scope: str = "global") -> str:
    """
    Identifier for one limited action.
    Prefers an explicit key (login identifier, reset email), otherwise the IP.
    """
    if key:
        return f"{scope}:key:{key.strip().lower()}"
    return f"{scope}:ip:{get_client_ip(request)}"


def require_rate_limit(
    request: Request,
    identifier: Optional[str] = None,
    max_requests: int = 10,
    window_seconds: int = 60,
) -> int:
    """
    Raises HTTPException 429 (with Retry-After) when the limit is exceeded.
    Returns the remaining request count otherwise.
    """
    if identifier is None:
        identifier = get_rate_limit_identifier(request)

    allowed, remaining = check_rate_limit(identifier, max_requests, window_seconds)

    if not allowed:
        logger.warning(f"Rate limit exceeded for {identifier.split(':key:')[0]} from {get_client_ip(request)}")
        raise HTTPException(
            status_code=429,
            detail=f"Rate limit exceeded. Maximum {max_requests} requests per {window_seconds} seconds.",
            headers={
                "X-RateLimit-Limit": str(max_requests),
                "X-RateLimit-Window": str(window_seconds),
                "Retry-After": str(window_seconds),
            },
        )

    return remaining
