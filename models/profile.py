# models/profile.py

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel


# -----------------------------------------------------
# Role directory rows (one per role per Supabase Auth user)
# -----------------------------------------------------
class AdminProfile(BaseModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    created_at: Optional[datetime] = None


class StaffProfile(BaseModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    is_active: bool = False
    created_at: Optional[datetime] = None


class UserProfile(BaseModel):
    id: str
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    # Lead details collected on the profile page
    is_nri: Optional[bool] = None
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    created_at: Optional[datetime] = None


RoleProfile = Union[AdminProfile, StaffProfile, UserProfile]


class StaffSummary(BaseModel):
    """Active staff entry for the admin task-assignment picker."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class AdminSummary(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class StaffActiveUpdate(BaseModel):
    is_active: bool
