from enum import Enum


class BaseStrEnum(str, Enum):
    """Base enum that serializes cleanly to a string."""

    def __str__(self):
        return str(self.value)


# -----------------------------------------------------
# AUTH DOMAINS
# -----------------------------------------------------
class Role(BaseStrEnum):
    """The three independently authenticated roles."""

    user = "user"
    admin = "admin"
    staff = "staff"


# -----------------------------------------------------
# PROPERTY MODERATION
# -----------------------------------------------------
class ApprovalStatus(BaseStrEnum):
    """Moderation state. A NULL column is read as approved (legacy rows)."""

    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class ListingType(BaseStrEnum):
    sale = "sale"
    rent = "rent"
    resale = "resale"


class PropertyType(BaseStrEnum):
    apartment = "apartment"
    house = "house"
    villa = "villa"
    plot = "plot"
    commercial = "commercial"


# -----------------------------------------------------
# STAFF TASKS
# -----------------------------------------------------
class TaskStatus(BaseStrEnum):
    """Workflow state for a staff task."""

    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"


class TaskPriority(BaseStrEnum):
    low = "low"
    medium = "medium"
    high = "high"


# -----------------------------------------------------
# LEADS
# -----------------------------------------------------
class Residency(BaseStrEnum):
    all = "all"
    nri = "nri"
    indian = "indian"
