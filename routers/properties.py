# routers/properties.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from core.supabase_client import get_supabase_client
from dependencies.auth import AuthContext, get_optional_context, require_user
from models.enums import ListingType, PropertyType, Role
from models.property import PropertyRead, PropertySubmission, SubmitterDashboard
from services import property_lifecycle


router = APIRouter(
    prefix="/properties",
    tags=["Properties"],
)


# -----------------------------------------------------
# GET /properties
# Public listing (approved or legacy rows only)
# -----------------------------------------------------
@router.get("", response_model=List[PropertyRead], summary="Browse listed properties")
def list_properties(
    city: Optional[str] = None,
    property_type: Optional[PropertyType] = None,
    listing_type: Optional[ListingType] = None,
    min_price: Optional[int] = Query(None, ge=0),
    max_price: Optional[int] = Query(None, ge=0),
    bedrooms: Optional[str] = Query(None, description='Exact count, or e.g. "5+"'),
    featured: bool = False,
):
    client = get_supabase_client()
    return property_lifecycle.list_public(
        client,
        city=city,
        property_type=property_type.value if property_type else None,
        listing_type=listing_type.value if listing_type else None,
        min_price=min_price,
        max_price=max_price,
        bedrooms=bedrooms,
        featured=featured,
    )


@router.get("/featured", response_model=List[PropertyRead], summary="Homepage featured listings")
def list_featured():
    return property_lifecycle.featured_properties(get_supabase_client())


# -----------------------------------------------------
# Submitter side
# -----------------------------------------------------
@router.get("/mine", response_model=SubmitterDashboard, summary="My submitted properties")
def my_properties(
    status: Optional[str] = Query(None, description="pending | approved | rejected | all"),
    ctx: AuthContext = Depends(require_user),
):
    """Every status is shown here, including rejection reasons."""
    client = get_supabase_client()
    return property_lifecycle.submitter_dashboard(client, ctx.identity_id, status)


@router.post("/submit", response_model=PropertyRead, status_code=201, summary="Submit a property for review")
def submit_property(
    payload: PropertySubmission,
    ctx: AuthContext = Depends(require_user),
):
    client = get_supabase_client()
    return property_lifecycle.submit_property(client, payload.model_dump(mode="json"), ctx.identity_id)


# -----------------------------------------------------
# Detail pages
# -----------------------------------------------------
@router.get("/{property_id}", response_model=PropertyRead, summary="Property detail")
def get_property(
    property_id: str,
    ctx: Optional[AuthContext] = Depends(get_optional_context),
):
    """
    Pending and rejected listings are only visible to their submitter
    and to admins; everyone else gets a 404.
    """
    client = get_supabase_client()
    return property_lifecycle.get_visible_property(
        client,
        property_id,
        viewer_id=ctx.identity_id if ctx else None,
        is_admin=bool(ctx and ctx.role == Role.admin),
    )


@router.get("/{property_id}/similar", response_model=List[PropertyRead], summary="Similar listings")
def get_similar(property_id: str):
    client = get_supabase_client()
    prop = property_lifecycle.get_visible_property(client, property_id)
    return property_lifecycle.similar_properties(client, prop)
