# -------------------------
# Enums
# -------------------------
from .enums import (
    Role,
    ApprovalStatus,
    ListingType,
    PropertyType,
    TaskStatus,
    TaskPriority,
    Residency,
)

# -------------------------
# Role Profiles
# -------------------------
from .profile import (
    AdminProfile,
    StaffProfile,
    UserProfile,
    RoleProfile,
    StaffSummary,
    AdminSummary,
    StaffActiveUpdate,
)

# -------------------------
# Auth Models
# -------------------------
from .auth import (
    LoginRequest,
    SignupRequest,
    TokenResponse,
    SignupResponse,
    PasswordResetRequest,
    PasswordUpdateRequest,
)

# -------------------------
# Property Models
# -------------------------
from .property import (
    PropertySubmission,
    PropertyCreate,
    PropertyRead,
    ApprovalQueueItem,
    RejectRequest,
    FeaturedUpdate,
    PropertyUpdate,
    SubmitterDashboard,
)

# -------------------------
# Task Models
# -------------------------
from .task import (
    TaskCreate,
    TaskUpdate,
    TaskStatusUpdate,
    TaskRead,
    TaskSummary,
    TaskList,
)

# -------------------------
# Leads
# -------------------------
from .exclusion import ExcludedIds, LeadList

__all__ = [
    # enums
    "Role",
    "ApprovalStatus",
    "ListingType",
    "PropertyType",
    "TaskStatus",
    "TaskPriority",
    "Residency",

    # profiles
    "AdminProfile",
    "StaffProfile",
    "UserProfile",
    "RoleProfile",
    "StaffSummary",
    "AdminSummary",
    "StaffActiveUpdate",

    # auth
    "LoginRequest",
    "SignupRequest",
    "TokenResponse",
    "SignupResponse",
    "PasswordResetRequest",
    "PasswordUpdateRequest",

    # properties
    "PropertySubmission",
    "PropertyCreate",
    "PropertyRead",
    "ApprovalQueueItem",
    "RejectRequest",
    "FeaturedUpdate",
    "PropertyUpdate",
    "SubmitterDashboard",

    # tasks
    "TaskCreate",
    "TaskUpdate",
    "TaskStatusUpdate",
    "TaskRead",
    "TaskSummary",
    "TaskList",

    # leads
    "ExcludedIds",
    "LeadList",
]
