from typing import Optional, Union

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from core.errors import AuthError, AuthErrorCode, AuthorizationError, MarketplaceError
from core.logging_config import logger
from core.roles import get_role_spec
from core.supabase_client import get_supabase_client
from models.enums import Role
from models.profile import AdminProfile, StaffProfile, UserProfile
from services import role_directory


bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================
# Request auth context (rebuilt on every request)
# ============================================================
class AuthContext(BaseModel):
    identity_id: str                # Supabase Auth user id
    email: Optional[str] = None
    role: Role
    profile: Optional[Union[AdminProfile, StaffProfile, UserProfile]] = None


# ============================================================
# TOKEN → IDENTITY (Supabase GoTrue)
# ============================================================
def get_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
):
    """
    Resolve the bearer token to a Supabase Auth user.
    Nothing the client says about its own role is read here.
    """
    if not credentials or not credentials.credentials:
        raise AuthError(AuthErrorCode.MISSING_AUTH)

    client = get_supabase_client()

    try:
        auth_resp = client.auth.get_user(credentials.credentials)
    except Exception as e:
        logger.debug(f"Token rejected by Supabase: {type(e).__name__}")
        raise AuthError(AuthErrorCode.INVALID_TOKEN) from e

    if not auth_resp or not auth_resp.user:
        raise AuthError(AuthErrorCode.INVALID_TOKEN)

    return auth_resp.user


def verify_role(identity, role) -> Optional[AuthContext]:
    """
    Check `identity` against one role table. Returns None when the
    identity is not a member; a failed lookup counts as not a member.
    """
    spec = get_role_spec(role)
    client = get_supabase_client()

    try:
        profile = role_directory.resolve_profile(client, spec, identity)
    except MarketplaceError as e:
        logger.warning(f"{spec.role.value} lookup failed for {identity.id}: {e.message}")
        return None

    if profile is None:
        return None

    return AuthContext(
        identity_id=identity.id,
        email=getattr(identity, "email", None),
        role=spec.role,
        profile=profile,
    )


# ============================================================
# ROLE CHECKER
# ============================================================
def require_role(*roles: Role):
    """
    Dependency factory: the caller must be a member of one of `roles`,
    tried in order. The first verified membership wins.
    """
    allowed = [Role(r) for r in roles]

    def checker(identity=Depends(get_identity)) -> AuthContext:
        for role in allowed:
            ctx = verify_role(identity, role)
            if ctx is not None:
                return ctx

        names = ", ".join(r.value for r in allowed)
        logger.warning(f"Identity {identity.id} denied: requires {names}")
        raise AuthorizationError(f"{names.capitalize()} access required")

    return checker


require_admin = require_role(Role.admin)
require_staff = require_role(Role.staff)
require_user = require_role(Role.user)


# ============================================================
# OPTIONAL AUTHENTICATION (for hybrid endpoints)
# ============================================================
def get_optional_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[AuthContext]:
    """
    Optional authentication for public pages that show more to the owner
    or to admins. Returns None instead of raising for missing or bad tokens.
    Non-admins get a bare user context without a profile lookup; only the
    identity id matters for ownership checks.
    """
    if not credentials:
        return None

    try:
        identity = get_identity(credentials)
    except AuthError:
        return None

    admin_ctx = verify_role(identity, Role.admin)
    if admin_ctx is not None:
        return admin_ctx

    return AuthContext(identity_id=identity.id, email=getattr(identity, "email", None), role=Role.user)
