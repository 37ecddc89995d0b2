from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from models.profile import AdminProfile, StaffProfile, UserProfile


# -----------------------------------------------------
# LOGIN REQUEST (email, or phone for the user role)
# -----------------------------------------------------
class LoginRequest(BaseModel):
    identifier: str = Field(..., min_length=1, description="Email, or phone number (users only)")
    password: str = Field(..., min_length=1)


# -----------------------------------------------------
# SIGNUP REQUEST (user role)
# -----------------------------------------------------
class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=10)
    email: EmailStr
    password: str


# -----------------------------------------------------
# TOKEN RESPONSE (Supabase session JWT + resolved profile)
# -----------------------------------------------------
class TokenResponse(BaseModel):
    access_token: str         # Supabase access token (JWT)
    refresh_token: str        # Supabase refresh token
    expires_in: Optional[int] = None
    token_type: str = "bearer"
    role: str
    profile: Optional[AdminProfile | StaffProfile | UserProfile] = None


class SignupResponse(BaseModel):
    status: str = "success"
    confirmation_required: bool
    profile: Optional[UserProfile] = None


# -----------------------------------------------------
# PASSWORD RECOVERY
# -----------------------------------------------------
class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordUpdateRequest(BaseModel):
    token_hash: str = Field(..., min_length=1, description="Recovery token from the reset email link")
    new_password: str
