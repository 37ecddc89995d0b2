# routers/admin_properties.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from core.supabase_client import get_supabase_client
from core.logging_config import logger
from dependencies.auth import AuthContext, require_admin
from models.property import (
    ApprovalQueueItem,
    FeaturedUpdate,
    PropertyCreate,
    PropertyRead,
    PropertyUpdate,
    RejectRequest,
)
from services import property_lifecycle


router = APIRouter(
    prefix="/admin/properties",
    tags=["Admin Properties"],
)


# -----------------------------------------------------
# Approvals tab
# -----------------------------------------------------
@router.get("/approvals", response_model=List[ApprovalQueueItem], summary="Submissions awaiting moderation")
def list_approvals(
    status: str = Query("pending", description="pending | approved | rejected"),
    ctx: AuthContext = Depends(require_admin),
):
    return property_lifecycle.approval_queue(get_supabase_client(), status)


@router.post("/{property_id}/approve", response_model=PropertyRead, summary="Approve a submission")
def approve_property(property_id: str, ctx: AuthContext = Depends(require_admin)):
    prop = property_lifecycle.approve(get_supabase_client(), property_id)
    logger.info(f"Admin {ctx.identity_id} approved property {property_id}")
    return prop


@router.post("/{property_id}/reject", response_model=PropertyRead, summary="Reject a submission")
def reject_property(
    property_id: str,
    payload: Optional[RejectRequest] = None,
    ctx: AuthContext = Depends(require_admin),
):
    reason = payload.reason if payload else None
    prop = property_lifecycle.reject(get_supabase_client(), property_id, reason)
    logger.info(f"Admin {ctx.identity_id} rejected property {property_id}")
    return prop


# -----------------------------------------------------
# Admin-managed listings
# -----------------------------------------------------
@router.post("", response_model=PropertyRead, status_code=201, summary="Create a listing (approved)")
def create_property(payload: PropertyCreate, ctx: AuthContext = Depends(require_admin)):
    return property_lifecycle.create_admin_listing(get_supabase_client(), payload.model_dump(mode="json"))


@router.put("/{property_id}", response_model=PropertyRead, summary="Edit a listing")
def update_property(
    property_id: str,
    payload: PropertyUpdate,
    ctx: AuthContext = Depends(require_admin),
):
    changes = payload.model_dump(exclude_unset=True, mode="json")
    prop = property_lifecycle.update_listing(get_supabase_client(), property_id, changes)
    logger.info(f"Admin {ctx.identity_id} edited property {property_id}")
    return prop


@router.patch("/{property_id}/featured", response_model=PropertyRead, summary="Toggle featured flag")
def toggle_featured(
    property_id: str,
    payload: FeaturedUpdate,
    ctx: AuthContext = Depends(require_admin),
):
    return property_lifecycle.set_featured(get_supabase_client(), property_id, payload.featured)


@router.delete("/{property_id}", summary="Delete a listing")
def delete_property(property_id: str, ctx: AuthContext = Depends(require_admin)):
    property_lifecycle.delete_property(get_supabase_client(), property_id)
    logger.info(f"Admin {ctx.identity_id} deleted property {property_id}")
    return {"success": True}
