# services/role_directory.py

"""
Role directory lookups.

A role profile is a row in the role's table keyed by the Supabase Auth
user id. These helpers are the single place that decides whether an
identity belongs to a role; both the session managers and the privileged
API go through them.
"""

from typing import Optional

from supabase import Client

from core.auth_helpers import normalize_email
from core.errors import NotFoundError, handle_supabase_error
from core.logging_config import logger
from core.roles import RoleSpec
from core.supabase_helpers import fetch_one, safe_update
from models.enums import Role
from models.profile import AdminProfile, RoleProfile, StaffProfile, UserProfile


PROFILE_MODELS = {
    Role.user: UserProfile,
    Role.admin: AdminProfile,
    Role.staff: StaffProfile,
}


def lookup_profile(client: Client, spec: RoleSpec, identity_id: str) -> Optional[RoleProfile]:
    """
    Returns the role profile for `identity_id`, or None if the identity
    is not a member of the role (for staff: no ACTIVE row).

    Raises StorageError when the lookup itself fails; callers must treat
    that as "not a member" (fail closed), never as a cached yes.
    """
    try:
        query = client.table(spec.table).select("*").eq("id", identity_id)
        if spec.requires_active:
            query = query.eq("is_active", True)
        result = query.limit(1).execute()
    except Exception as e:
        raise handle_supabase_error(e, f"Failed to resolve {spec.role.value} profile") from e

    if not result.data:
        return None

    return PROFILE_MODELS[spec.role](**result.data[0])


def upsert_user_profile(client: Client, identity_id: str, name: str, phone: str, email: str) -> UserProfile:
    row = {
        "id": identity_id,
        "name": name,
        "phone": phone,
        "email": email,
    }

    try:
        result = client.table("user_profiles").upsert(row, on_conflict="id").execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to create user profile") from e

    data = result.data[0] if result.data else row
    return UserProfile(**data)


def heal_user_profile(client: Client, identity) -> Optional[UserProfile]:
    """
    Creates the missing user_profiles row for a signed-up identity from its
    auth metadata (name/phone captured at sign-up). Returns None when the
    metadata is incomplete or its phone or email belongs to another profile.
    """
    metadata = getattr(identity, "user_metadata", None) or {}
    name = metadata.get("name")
    phone = metadata.get("phone")
    email = normalize_email(getattr(identity, "email", None))

    if not name or not phone:
        logger.warning(f"Cannot self-heal user profile for {identity.id}: metadata incomplete")
        return None

    # Same uniqueness rules as sign-up; metadata is user-editable
    for field, value in (("phone", phone), ("email", email)):
        if not value:
            continue
        owner = find_user_profile(client, **{field: value})
        if owner and owner.get("id") != identity.id:
            logger.warning(f"Cannot self-heal user profile for {identity.id}: {field} already registered")
            return None

    profile = upsert_user_profile(client, identity.id, name, phone, email or None)
    logger.info(f"Self-healed missing user profile for {identity.id}")
    return profile


def resolve_profile(client: Client, spec: RoleSpec, identity) -> Optional[RoleProfile]:
    """lookup_profile, plus self-healing for roles that allow it."""
    profile = lookup_profile(client, spec, identity.id)
    if profile is None and spec.self_heals_profile:
        profile = heal_user_profile(client, identity)
    return profile


def find_user_profile(client: Client, **filters) -> Optional[dict]:
    """First user_profiles row matching equality filters (phone/email)."""
    return fetch_one(client, "user_profiles", filters)


def list_active_staff(client: Client) -> list[dict]:
    try:
        result = (
            client.table("crm_staff")
            .select("id, name, email")
            .eq("is_active", True)
            .order("name")
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load staff") from e
    return result.data or []


def is_active_staff(client: Client, identity_id: str) -> bool:
    try:
        result = (
            client.table("crm_staff")
            .select("id")
            .eq("id", identity_id)
            .eq("is_active", True)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to verify staff member") from e
    return bool(result.data)


def set_staff_active(client: Client, staff_id: str, is_active: bool) -> StaffProfile:
    """
    Activate or deactivate a staff member. Deactivation takes effect on the
    member's next privileged call; no session is revoked here.
    """
    updated = safe_update(client, "crm_staff", {"id": staff_id}, {"is_active": is_active})
    if not updated:
        raise NotFoundError("Staff member not found")

    logger.info(f"Staff {staff_id} {'activated' if is_active else 'deactivated'}")
    return StaffProfile(**updated)
