"""Test helper functions."""

from types import SimpleNamespace


ADMIN_ID = "admin-1"
STAFF_ID = "staff-1"
OTHER_STAFF_ID = "staff-2"
INACTIVE_STAFF_ID = "staff-inactive"
USER_ID = "user-1"
OTHER_USER_ID = "user-2"


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def make_user(user_id: str, email: str, metadata: dict = None) -> SimpleNamespace:
    return SimpleNamespace(id=user_id, email=email, user_metadata=metadata or {})


def make_session(user_id: str, email: str, metadata: dict = None) -> SimpleNamespace:
    """Shape of a gotrue Session as read by the session manager."""
    return SimpleNamespace(
        access_token=f"access-{user_id}",
        refresh_token=f"refresh-{user_id}",
        expires_in=3600,
        user=make_user(user_id, email, metadata),
    )


def make_auth_response(session) -> SimpleNamespace:
    """Shape of sign_in_with_password / sign_up responses."""
    return SimpleNamespace(session=session, user=session.user if session else None)
