# core/errors.py

from enum import Enum
from typing import Optional


# ============================================================
# Domain error taxonomy
# ============================================================
class MarketplaceError(Exception):
    """
    Base error for the marketplace.

    Every subclass carries the HTTP status it maps to and a public
    message that is safe to return to callers. Internal details stay
    in the logs.
    """

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthErrorCode(str, Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    DUPLICATE_PHONE = "duplicate_phone"
    DUPLICATE_EMAIL = "duplicate_email"
    NOT_AUTHORIZED_FOR_ROLE = "not_authorized_for_role"
    NOT_FOUND = "not_found"
    MISSING_AUTH = "missing_auth"
    INVALID_TOKEN = "invalid_token"
    RECOVERY_REQUIRED = "recovery_required"


AUTH_ERROR_STATUS = {
    AuthErrorCode.INVALID_CREDENTIALS: 401,
    AuthErrorCode.MISSING_AUTH: 401,
    AuthErrorCode.INVALID_TOKEN: 401,
    AuthErrorCode.RECOVERY_REQUIRED: 401,
    AuthErrorCode.NOT_AUTHORIZED_FOR_ROLE: 403,
    AuthErrorCode.NOT_FOUND: 404,
    AuthErrorCode.DUPLICATE_PHONE: 409,
    AuthErrorCode.DUPLICATE_EMAIL: 409,
}

AUTH_ERROR_MESSAGES = {
    AuthErrorCode.INVALID_CREDENTIALS: "Invalid email or password",
    AuthErrorCode.DUPLICATE_PHONE: "This phone number is already registered",
    AuthErrorCode.DUPLICATE_EMAIL: "This email is already registered",
    AuthErrorCode.NOT_AUTHORIZED_FOR_ROLE: "This account is not authorized for this area",
    AuthErrorCode.NOT_FOUND: "No account found with this phone number",
    AuthErrorCode.MISSING_AUTH: "Missing authorization header",
    AuthErrorCode.INVALID_TOKEN: "Invalid or expired authentication token",
    AuthErrorCode.RECOVERY_REQUIRED: "Password reset link is invalid or has expired",
}


class AuthError(MarketplaceError):
    """Credential, identity, or role-membership failure."""

    def __init__(self, code: AuthErrorCode, message: Optional[str] = None):
        self.code = code
        self.status_code = AUTH_ERROR_STATUS[code]
        super().__init__(message or AUTH_ERROR_MESSAGES[code])


class ValidationError(MarketplaceError):
    status_code = 400
    default_message = "Invalid request"


class InvalidAssignee(ValidationError):
    default_message = "Invalid staff member"


class NotFoundError(MarketplaceError):
    """
    Entity absent, or present but outside the caller's scope.
    Callers cannot tell the two cases apart.
    """

    status_code = 404
    default_message = "Not found"


class AuthorizationError(MarketplaceError):
    status_code = 403
    default_message = "Forbidden"


class ExclusionFetchError(MarketplaceError):
    """The admin/staff exclusion set could not be loaded."""

    status_code = 503
    default_message = "Failed to load exclusion list"


class StorageError(MarketplaceError):
    status_code = 500
    default_message = "Database operation failed"


# ============================================================
# Supabase error normalization
# ============================================================
def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    # Case 1: Supabase Auth / PostgREST errors expose .message
    message = getattr(error, "message", None)
    if message:
        return str(message)

    # Case 2: errors with args
    if getattr(error, "args", None):
        return str(error.args[0])

    return str(error) or type(error).__name__


def handle_supabase_error(error: Exception, operation: str = "Database operation") -> MarketplaceError:
    """
    Convert a Supabase exception into a domain error.
    Returns (doesn't raise) so the caller can re-raise with `from`.

    Args:
        error: The exception that occurred
        operation: What failed (e.g., "Failed to create task")
    """
    from core.logging_config import logger

    error_detail = extract_supabase_error(error)
    logger.error(f"{operation}: {error_detail}")

    error_lower = error_detail.lower()
    if "duplicate" in error_lower or "unique" in error_lower:
        return ValidationError(f"{operation}: Record already exists")
    if "foreign key" in error_lower:
        return ValidationError(f"{operation}: Invalid reference")
    return StorageError(operation)
