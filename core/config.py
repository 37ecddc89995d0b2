from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Listing Marketplace API"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # -------------------------------------------------
    # Frontend Domains
    # -------------------------------------------------
    FRONTEND_DOMAIN: Optional[str] = Field(None, env="FRONTEND_DOMAIN")

    MARKETPLACE_DOMAINS: List[str] = [
        "http://localhost:3000",
    ]

    # -------------------------------------------------
    # CORS (auto-built below)
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Primary DB & Auth)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = Field(None, env="SUPABASE_URL")
    SUPABASE_ANON_KEY: Optional[str] = Field(None, env="SUPABASE_ANON_KEY")
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(None, env="SUPABASE_SERVICE_ROLE_KEY")

    # Prefix for the per-role session storage namespaces
    # (e.g. "ghardaar-staff-auth")
    SESSION_STORAGE_PREFIX: str = "ghardaar"

    # -------------------------------------------------
    # Auth redirects (links inside Supabase emails)
    # -------------------------------------------------
    PASSWORD_RESET_REDIRECT_URL: Optional[str] = Field(None, env="PASSWORD_RESET_REDIRECT_URL")
    SIGNUP_REDIRECT_URL: Optional[str] = Field(None, env="SIGNUP_REDIRECT_URL")

    # -------------------------------------------------
    # Rate limits
    # -------------------------------------------------
    LOGIN_MAX_ATTEMPTS: int = Field(10, description="Login attempts per identifier per window")
    LOGIN_WINDOW_SECONDS: int = Field(300, description="Login rate limit window")
    PASSWORD_RESET_MAX_REQUESTS: int = Field(5, description="Reset emails per address per window")
    PASSWORD_RESET_WINDOW_SECONDS: int = Field(900, description="Password reset rate limit window")

    # -------------------------------------------------
    # Listings
    # -------------------------------------------------
    PUBLIC_LISTING_LIMIT: int = 50
    FEATURED_LISTING_LIMIT: int = 6
    SIMILAR_LISTING_LIMIT: int = 4

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
cors_origins = []

# 1) add configured frontend domain
if settings.FRONTEND_DOMAIN:
    domain = settings.FRONTEND_DOMAIN
    if not domain.startswith("http"):
        domain = f"https://{domain}"
    cors_origins.append(domain.rstrip("/"))

# 2) add known marketplace domains
cors_origins.extend([d.rstrip("/") for d in settings.MARKETPLACE_DOMAINS])

# 3) remove duplicates
settings.BACKEND_CORS_ORIGINS = sorted(list(set(cors_origins)))
