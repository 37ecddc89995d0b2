# models/exclusion.py

from typing import List

from pydantic import BaseModel, Field

from models.profile import UserProfile


class ExcludedIds(BaseModel):
    """Identity ids of internal accounts, kept out of lead views."""
    admin_ids: List[str] = Field(default_factory=list, serialization_alias="adminIds")
    staff_ids: List[str] = Field(default_factory=list, serialization_alias="staffIds")

    def all_ids(self) -> set[str]:
        return set(self.admin_ids) | set(self.staff_ids)


class LeadList(BaseModel):
    leads: List[UserProfile]
    total: int
