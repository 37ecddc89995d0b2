# services/session_manager.py

"""
Per-role session management.

One SessionManager exists per role per client runtime. Each wraps its own
Supabase client whose auth storage is namespaced by the role's storage key,
so the user, admin and staff sessions never see each other's tokens or
cached profiles even when they share a backing store.

The profile cached here is a display hint for the client. The privileged
API never trusts it and re-verifies the role from the bearer token.
"""

from threading import Lock
from typing import Dict, Optional

from supabase import Client

from core.auth_helpers import looks_like_phone, normalize_email, validate_password_strength
from core.config import settings
from core.errors import (
    AuthError,
    AuthErrorCode,
    MarketplaceError,
    StorageError,
    ValidationError,
    extract_supabase_error,
)
from core.logging_config import logger, mask_email
from core.roles import RoleSpec, get_role_spec
from core.supabase_client import MemoryStore, NamespacedStorage, create_role_client
from models.enums import Role
from models.profile import RoleProfile, UserProfile
from services import role_directory


# Auth events that carry a (possibly new) signed-in identity
RESOLVING_EVENTS = {"SIGNED_IN", "TOKEN_REFRESHED", "USER_UPDATED", "PASSWORD_RECOVERY"}


class SessionManager:
    def __init__(self, spec: RoleSpec, client: Client, storage: Optional[NamespacedStorage] = None):
        self.spec = spec
        self.client = client
        self.storage = storage

        self._profile: Optional[RoleProfile] = None
        self._resolved_for: Optional[str] = None
        self._resolving = Lock()
        self._recovery_armed = False

        self._subscription = client.auth.on_auth_state_change(self.handle_auth_event)

    @property
    def role(self) -> Role:
        return self.spec.role

    # ============================================================
    # Profile resolution
    # ============================================================
    def current_profile(self) -> Optional[RoleProfile]:
        """Last resolved profile; None until resolution completes."""
        return self._profile

    def _clear(self) -> None:
        self._profile = None
        self._resolved_for = None

    def _resolve(self, identity, *, wait: bool = False) -> Optional[RoleProfile]:
        """
        Resolve `identity` to this role's profile.

        Only one resolution runs at a time. Event-driven triggers
        (wait=False) that find one in flight return the cached value
        instead of issuing a duplicate lookup; sign-in and restore
        (wait=True) block for it and reuse its result for the same
        identity.
        """
        if not self._resolving.acquire(blocking=wait):
            logger.debug(f"{self.role.value} profile resolution already in flight")
            return self._profile

        try:
            if wait and self._resolved_for == identity.id:
                return self._profile

            try:
                profile = role_directory.resolve_profile(self.client, self.spec, identity)
            except MarketplaceError:
                self._clear()
                raise

            self._profile = profile
            self._resolved_for = identity.id
            return profile
        finally:
            self._resolving.release()

    def handle_auth_event(self, event: str, session) -> None:
        """Callback for the role client's auth state changes."""
        if event == "INITIAL_SESSION":
            return

        if event == "PASSWORD_RECOVERY":
            self._recovery_armed = True

        user = getattr(session, "user", None) if session else None
        if event == "SIGNED_OUT" or user is None:
            self._clear()
            return

        if event in RESOLVING_EVENTS:
            try:
                self._resolve(user)
            except MarketplaceError as e:
                logger.warning(f"{self.role.value} profile refresh failed: {e.message}")

    # ============================================================
    # Sign in / out
    # ============================================================
    def _email_for(self, identifier: str) -> str:
        identifier = (identifier or "").strip()

        if not looks_like_phone(identifier):
            return normalize_email(identifier)

        if not self.spec.allows_phone_login:
            raise AuthError(AuthErrorCode.INVALID_CREDENTIALS)

        row = role_directory.find_user_profile(self.client, phone=identifier)
        if not row or not row.get("email"):
            raise AuthError(AuthErrorCode.NOT_FOUND)
        return normalize_email(row["email"])

    def sign_in(self, identifier: str, password: str) -> RoleProfile:
        """
        Exchange credentials and verify membership in this role.
        A valid password alone does not grant the role: without a profile
        the fresh session is torn down and NOT_AUTHORIZED_FOR_ROLE raised.
        """
        email = self._email_for(identifier)

        # Never let a previous session's membership authorize this one
        self._clear()

        try:
            response = self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as e:
            logger.warning(f"{self.role.value} login failed for {mask_email(email)}: {type(e).__name__}")
            raise AuthError(AuthErrorCode.INVALID_CREDENTIALS) from e

        if not response or not response.session or not response.user:
            raise AuthError(AuthErrorCode.INVALID_CREDENTIALS)

        try:
            profile = self._resolve(response.user, wait=True)
        except MarketplaceError:
            profile = None

        if profile is None:
            logger.warning(f"{mask_email(email)} is not authorized for {self.role.value}")
            self._teardown()
            raise AuthError(AuthErrorCode.NOT_AUTHORIZED_FOR_ROLE)

        logger.info(f"{self.role.value} signed in: {mask_email(email)}")
        return profile

    def _teardown(self) -> None:
        """Local sign-out: other roles' sessions for the same identity survive."""
        try:
            self.client.auth.sign_out({"scope": "local"})
        except Exception as e:
            # The auth client raises before removing its stored session
            logger.warning(f"{self.role.value} sign-out error: {type(e).__name__}")
            if self.storage is not None:
                self.storage.clear_session()
        finally:
            self._clear()
            self._recovery_armed = False

    def sign_out(self) -> None:
        self._teardown()
        logger.info(f"{self.role.value} signed out")

    def restore(self) -> Optional[RoleProfile]:
        """
        Resume a persisted session (app start). A session whose identity no
        longer belongs to the role, or can't be checked, is torn down.
        """
        try:
            session = self.client.auth.get_session()
        except Exception as e:
            logger.warning(f"Error getting {self.role.value} session: {type(e).__name__}")
            session = None

        if not session or not session.user or not session.access_token:
            self._clear()
            return None

        try:
            profile = self._resolve(session.user, wait=True)
        except MarketplaceError:
            profile = None

        if profile is None:
            self._teardown()
        return profile

    def current_session(self):
        try:
            return self.client.auth.get_session()
        except Exception as e:
            logger.warning(f"Error getting {self.role.value} session: {type(e).__name__}")
            return None

    # ============================================================
    # Sign up (user role)
    # ============================================================
    def sign_up(self, name: str, phone: str, email: str, password: str) -> Optional[UserProfile]:
        """
        Register a public user. Returns the profile when the provider hands
        back a live session (no email confirmation); otherwise None, and the
        profile is created from auth metadata on first sign-in.
        """
        if not self.spec.allows_signup:
            raise ValidationError(f"Sign-up is not available for {self.role.value} accounts")

        name = (name or "").strip()
        phone = (phone or "").strip()
        email = normalize_email(email)
        if not name or not phone or not email:
            raise ValidationError("Name, phone and email are required")
        validate_password_strength(password)

        if role_directory.find_user_profile(self.client, phone=phone):
            raise AuthError(AuthErrorCode.DUPLICATE_PHONE)
        if role_directory.find_user_profile(self.client, email=email):
            raise AuthError(AuthErrorCode.DUPLICATE_EMAIL)

        options = {"data": {"name": name, "phone": phone}}
        if settings.SIGNUP_REDIRECT_URL:
            options["email_redirect_to"] = settings.SIGNUP_REDIRECT_URL

        try:
            response = self.client.auth.sign_up(
                {"email": email, "password": password, "options": options}
            )
        except Exception as e:
            raise ValidationError(extract_supabase_error(e)) from e

        user = response.user if response else None
        if user is None:
            raise ValidationError("Sign-up failed")

        logger.info(f"User signed up: {mask_email(email)}")

        if not response.session:
            return None

        try:
            profile = role_directory.upsert_user_profile(self.client, user.id, name, phone, email)
        except MarketplaceError as e:
            # Healed on first authenticated access
            logger.error(f"Profile creation deferred for {user.id}: {e.message}")
            return None

        self._profile = profile
        self._resolved_for = user.id
        return profile

    # ============================================================
    # Password recovery
    # ============================================================
    def request_password_reset(self, email: str, redirect_to: Optional[str] = None) -> None:
        email = normalize_email(email)
        options = {}
        redirect = redirect_to or settings.PASSWORD_RESET_REDIRECT_URL
        if redirect:
            options["redirect_to"] = redirect

        try:
            self.client.auth.reset_password_for_email(email, options)
        except Exception as e:
            logger.error(f"Failed to send password reset email to {mask_email(email)}: {type(e).__name__}")
            raise StorageError("Failed to send password reset email") from e

        logger.info(f"Password reset requested: {mask_email(email)} ({self.role.value})")

    def begin_recovery(self, token_hash: str) -> None:
        """Verify the one-time recovery token from the reset email."""
        try:
            response = self.client.auth.verify_otp({"type": "recovery", "token_hash": token_hash})
        except Exception as e:
            raise AuthError(AuthErrorCode.RECOVERY_REQUIRED) from e

        if not response or not response.session:
            raise AuthError(AuthErrorCode.RECOVERY_REQUIRED)

        self._recovery_armed = True

    @property
    def in_recovery(self) -> bool:
        return self._recovery_armed

    def reset_password(self, new_password: str) -> None:
        """Set a new password; only valid inside a recovery session."""
        if not self._recovery_armed:
            raise AuthError(AuthErrorCode.RECOVERY_REQUIRED)

        validate_password_strength(new_password)

        try:
            self.client.auth.update_user({"password": new_password})
        except Exception as e:
            raise ValidationError(extract_supabase_error(e)) from e

        self._recovery_armed = False
        logger.info(f"{self.role.value} password updated")

        # The recovery session has not been through the role gate
        self._teardown()

    def close(self) -> None:
        try:
            self._subscription.unsubscribe()
        except Exception as e:
            logger.debug(f"Auth subscription cleanup failed: {e}")


# ============================================================
# Factories
# ============================================================
def build_session_manager(
    role,
    store: Optional[MemoryStore] = None,
    *,
    persist_session: bool = True,
    auto_refresh_token: bool = True,
) -> SessionManager:
    spec = get_role_spec(role)
    storage = NamespacedStorage(spec.storage_key, store)
    client = create_role_client(
        storage,
        persist_session=persist_session,
        auto_refresh_token=auto_refresh_token,
    )
    return SessionManager(spec, client, storage)


def build_session_managers(store: Optional[MemoryStore] = None) -> Dict[Role, SessionManager]:
    """All three managers for one client runtime, sharing one backing store."""
    store = store if store is not None else MemoryStore()
    return {role: build_session_manager(role, store) for role in Role}
