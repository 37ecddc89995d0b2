# routers/admin.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from core.supabase_client import get_supabase_client
from core.logging_config import logger
from dependencies.auth import AuthContext, require_admin
from models.enums import Residency
from models.exclusion import ExcludedIds, LeadList
from models.profile import StaffActiveUpdate, StaffProfile, StaffSummary
from services import exclusion, role_directory


router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
)


# -----------------------------------------------------
# GET /admin/staff
# Active staff for the task-assignment picker
# -----------------------------------------------------
@router.get("/staff", response_model=List[StaffSummary], summary="Active staff members")
def list_staff(ctx: AuthContext = Depends(require_admin)):
    return role_directory.list_active_staff(get_supabase_client())


# -----------------------------------------------------
# PATCH /admin/staff/{staff_id}/active
# is_active gates the whole staff role
# -----------------------------------------------------
@router.patch("/staff/{staff_id}/active", response_model=StaffProfile, summary="Activate or deactivate a staff member")
def set_staff_active(
    staff_id: str,
    payload: StaffActiveUpdate,
    ctx: AuthContext = Depends(require_admin),
):
    return role_directory.set_staff_active(get_supabase_client(), staff_id, payload.is_active)


# -----------------------------------------------------
# GET /admin/excluded-ids
# Internal account ids (admins + staff) kept out of lead views
# -----------------------------------------------------
@router.get("/excluded-ids", response_model=ExcludedIds, summary="Internal account ids")
def list_excluded_ids(ctx: AuthContext = Depends(require_admin)):
    return exclusion.fetch_excluded_ids(get_supabase_client())


# -----------------------------------------------------
# GET /admin/leads
# Fails with 503 rather than return an unfiltered list
# -----------------------------------------------------
@router.get("/leads", response_model=LeadList, summary="Lead list (internal accounts excluded)")
def list_leads(
    search: Optional[str] = Query(None, description="Name, email or phone"),
    residency: Residency = Residency.all,
    ctx: AuthContext = Depends(require_admin),
):
    leads = exclusion.load_leads(
        get_supabase_client(),
        search=search,
        residency=residency.value,
    )
    logger.info(f"Admin {ctx.identity_id} loaded {len(leads)} leads")
    return {"leads": leads, "total": len(leads)}
