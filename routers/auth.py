from fastapi import APIRouter, Depends, Request

from core.config import settings
from core.errors import AuthError, AuthErrorCode, MarketplaceError
from core.logging_config import logger, mask_email
from core.rate_limiter import get_client_ip, get_rate_limit_identifier, require_rate_limit
from core.supabase_client import MemoryStore
from dependencies.auth import AuthContext, get_identity, verify_role
from models.auth import (
    LoginRequest,
    PasswordResetRequest,
    PasswordUpdateRequest,
    SignupRequest,
    SignupResponse,
    TokenResponse,
)
from models.enums import Role
from services.session_manager import SessionManager, build_session_manager


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


RESET_RESPONSE = {
    "success": True,
    "message": "If an account exists with this email, a password reset link has been sent.",
}


def new_session_manager(role: Role) -> SessionManager:
    """
    Throwaway manager for one HTTP request: its own in-memory storage,
    no persistence, no background refresh.
    """
    return build_session_manager(
        role,
        MemoryStore(),
        persist_session=False,
        auto_refresh_token=False,
    )


# ============================================================
# LOGIN (per role)
# ============================================================
@router.post("/{role}/login", response_model=TokenResponse, summary="Sign in to one role")
def login(role: Role, payload: LoginRequest, request: Request):
    """
    Email + password for every role; users may also sign in with their
    phone number. Succeeds only if the identity is a member of `role`.
    """
    identifier = get_rate_limit_identifier(request, key=payload.identifier, scope=f"login:{role.value}")
    require_rate_limit(
        request,
        identifier=identifier,
        max_requests=settings.LOGIN_MAX_ATTEMPTS,
        window_seconds=settings.LOGIN_WINDOW_SECONDS,
    )

    manager = new_session_manager(role)
    try:
        profile = manager.sign_in(payload.identifier, payload.password)
        session = manager.current_session()
    finally:
        manager.close()

    if not session or not session.access_token:
        raise AuthError(AuthErrorCode.INVALID_CREDENTIALS)

    return TokenResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=getattr(session, "expires_in", None),
        role=role.value,
        profile=profile,
    )


# ============================================================
# SIGNUP (public users only)
# ============================================================
@router.post("/user/signup", response_model=SignupResponse, summary="Register a public user")
def signup(payload: SignupRequest):
    manager = new_session_manager(Role.user)
    try:
        profile = manager.sign_up(payload.name, payload.phone, payload.email, payload.password)
        confirmation_required = manager.current_session() is None
    finally:
        manager.close()

    return SignupResponse(
        confirmation_required=confirmation_required,
        profile=profile,
    )


# ============================================================
# PASSWORD RESET EMAIL
# ============================================================
@router.post(
    "/{role}/password-reset",
    summary="Send a password reset email",
    responses={429: {"description": "Rate limit exceeded"}},
)
def request_password_reset(role: Role, payload: PasswordResetRequest, request: Request):
    """
    Always answers success so the endpoint can't be used to probe which
    addresses have accounts.
    """
    email = str(payload.email).strip().lower()

    identifier = get_rate_limit_identifier(request, key=email, scope="password-reset")
    require_rate_limit(
        request,
        identifier=identifier,
        max_requests=settings.PASSWORD_RESET_MAX_REQUESTS,
        window_seconds=settings.PASSWORD_RESET_WINDOW_SECONDS,
    )

    logger.info(f"Password reset attempt: email={mask_email(email)}, role={role.value}, ip={get_client_ip(request)}")

    manager = new_session_manager(role)
    try:
        manager.request_password_reset(email)
    except MarketplaceError:
        # Already logged; the response must not differ
        pass
    finally:
        manager.close()

    return RESET_RESPONSE


# ============================================================
# SET NEW PASSWORD (recovery link)
# ============================================================
@router.post("/{role}/reset-password", summary="Set a new password from a recovery link")
def reset_password(role: Role, payload: PasswordUpdateRequest):
    manager = new_session_manager(role)
    try:
        manager.begin_recovery(payload.token_hash)
        manager.reset_password(payload.new_password)
    finally:
        manager.close()

    return {"success": True, "message": "Password updated. Please sign in again."}


# ============================================================
# CURRENT PROFILE (re-verified for the bearer token)
# ============================================================
@router.get("/{role}/me", response_model=AuthContext, summary="Current identity within one role")
def read_me(role: Role, identity=Depends(get_identity)):
    ctx = verify_role(identity, role)
    if ctx is None:
        raise AuthError(AuthErrorCode.NOT_AUTHORIZED_FOR_ROLE)
    return ctx
