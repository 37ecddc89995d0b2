# ============================================
# CENTRALIZED ROLE DEFINITIONS
# ============================================
# The three authentication domains share one Supabase Auth project.
# Membership in a role is a row in that role's table, keyed by the
# Supabase Auth user id, and is checked independently per role.
# ============================================
from dataclasses import dataclass

from core.config import settings
from models.enums import Role


@dataclass(frozen=True)
class RoleSpec:
    role: Role
    table: str                      # role directory table
    requires_active: bool = False   # staff rows gate on is_active
    allows_phone_login: bool = False
    allows_signup: bool = False
    self_heals_profile: bool = False  # create missing row from auth metadata

    @property
    def storage_key(self) -> str:
        """Session storage namespace, e.g. "ghardaar-staff-auth"."""
        return f"{settings.SESSION_STORAGE_PREFIX}-{self.role.value}-auth"


ROLE_SPECS = {

    # =====================================================
    # PUBLIC USER: browses, submits listings
    # =====================================================
    Role.user: RoleSpec(
        role=Role.user,
        table="user_profiles",
        allows_phone_login=True,
        allows_signup=True,
        self_heals_profile=True,
    ),

    # =====================================================
    # ADMIN: moderation, tasks, leads
    # =====================================================
    Role.admin: RoleSpec(
        role=Role.admin,
        table="admins",
    ),

    # =====================================================
    # CRM STAFF: assigned tasks only, must be active
    # =====================================================
    Role.staff: RoleSpec(
        role=Role.staff,
        table="crm_staff",
        requires_active=True,
    ),
}


def get_role_spec(role) -> RoleSpec:
    return ROLE_SPECS[Role(role)]
