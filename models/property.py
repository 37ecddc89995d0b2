# models/property.py

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from models.enums import ApprovalStatus, ListingType, PropertyType


# -------------------------------------------------
# Shared listing fields
# -------------------------------------------------
class PropertyBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: int = Field(..., gt=0)
    area: str = Field(..., min_length=1)
    city: Optional[str] = None
    address: str = Field(..., min_length=1)
    bedrooms: int = 0
    bathrooms: int = 0
    property_type: PropertyType = PropertyType.apartment
    images: List[str] = []
    amenities: List[str] = []
    brochure_urls: List[str] = []

    # Project details
    land_parcel: Optional[float] = None
    towers: Optional[int] = None
    floors: Optional[str] = None
    config: Optional[str] = None
    carpet_area: Optional[str] = None

    # RERA & legal details
    rera_no: Optional[str] = None
    possession_status: Optional[str] = None
    target_possession: Optional[str] = None
    litigation: bool = False


# -------------------------------------------------
# User submission (enters moderation as pending)
# -------------------------------------------------
class PropertySubmission(PropertyBase):
    """
    Public users list rentals and resales only. Moderation fields are
    not accepted here; the lifecycle engine sets them.
    """
    listing_type: Literal["rent", "resale"] = "rent"

    @field_validator("brochure_urls")
    @classmethod
    def limit_brochures(cls, v):
        if len(v) > 2:
            raise ValueError("Maximum 2 brochures allowed for user submissions")
        return v


# -------------------------------------------------
# Admin-created listing (approved on creation)
# -------------------------------------------------
class PropertyCreate(PropertyBase):
    listing_type: ListingType = ListingType.sale
    featured: bool = False


# -------------------------------------------------
# Read (Supabase → API response)
# -------------------------------------------------
class PropertyRead(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    price: Optional[float] = None
    area: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    property_type: Optional[str] = None
    listing_type: Optional[str] = None
    images: List[str] = []
    amenities: List[str] = []
    brochure_urls: List[str] = []
    featured: bool = False

    land_parcel: Optional[float] = None
    towers: Optional[int] = None
    floors: Optional[str] = None
    config: Optional[str] = None
    carpet_area: Optional[str] = None
    rera_no: Optional[str] = None
    possession_status: Optional[str] = None
    target_possession: Optional[str] = None
    litigation: Optional[bool] = None

    # Approval workflow
    approval_status: Optional[ApprovalStatus] = None
    submitted_by: Optional[str] = None
    submission_date: Optional[datetime] = None
    approval_date: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("images", "amenities", "brochure_urls", mode="before")
    @classmethod
    def null_list(cls, v):
        return v or []

    @field_validator("featured", mode="before")
    @classmethod
    def null_featured(cls, v):
        return bool(v)


class SubmitterInfo(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class ApprovalQueueItem(PropertyRead):
    """Property row plus who submitted it (admin approvals tab)."""
    submitter: Optional[SubmitterInfo] = None


# -------------------------------------------------
# Moderation actions
# -------------------------------------------------
class RejectRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class FeaturedUpdate(BaseModel):
    featured: bool


# -------------------------------------------------
# Admin edit (moderation fields are not editable)
# -------------------------------------------------
class PropertyUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[int] = Field(None, gt=0)
    area: Optional[str] = Field(None, min_length=1)
    city: Optional[str] = None
    address: Optional[str] = Field(None, min_length=1)
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    property_type: Optional[PropertyType] = None
    listing_type: Optional[ListingType] = None
    images: Optional[List[str]] = None
    amenities: Optional[List[str]] = None
    brochure_urls: Optional[List[str]] = None
    featured: Optional[bool] = None

    land_parcel: Optional[float] = None
    towers: Optional[int] = None
    floors: Optional[str] = None
    config: Optional[str] = None
    carpet_area: Optional[str] = None
    rera_no: Optional[str] = None
    possession_status: Optional[str] = None
    target_possession: Optional[str] = None
    litigation: Optional[bool] = None

    model_config = {"extra": "forbid"}


# -------------------------------------------------
# Submitter dashboard
# -------------------------------------------------
class StatusCounts(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0


class SubmitterDashboard(BaseModel):
    properties: List[PropertyRead]
    counts: StatusCounts
