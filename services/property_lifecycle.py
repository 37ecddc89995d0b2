# services/property_lifecycle.py

"""
Property moderation lifecycle.

    user submission ──► pending ──approve──► approved
                            └─────reject───► rejected

Admin-created listings are written as approved. Rows that predate
moderation have a NULL approval_status and are read as approved.
Nothing moves a property back to pending automatically.
"""

from datetime import datetime
from typing import Optional

from supabase import Client

from core.config import settings
from core.errors import NotFoundError, ValidationError, handle_supabase_error
from core.logging_config import logger
from core.supabase_helpers import fetch_one, safe_delete, safe_insert, safe_update
from core.utils import utc_now
from models.enums import ApprovalStatus


TABLE = "properties"

# PostgREST filter for the public visibility rule
PUBLIC_VISIBILITY_FILTER = "approval_status.is.null,approval_status.eq.approved"

# Fields only the lifecycle engine may write
MODERATION_FIELDS = ("approval_status", "approval_date", "rejection_reason", "submitted_by", "submission_date")


# -----------------------------------------------------
# Pure rules
# -----------------------------------------------------
def effective_status(prop: dict) -> ApprovalStatus:
    """approval_status with the legacy NULL → approved rule applied."""
    raw = prop.get("approval_status")
    return ApprovalStatus(raw) if raw else ApprovalStatus.approved


def is_publicly_listable(prop: dict) -> bool:
    return effective_status(prop) == ApprovalStatus.approved


def can_view(prop: dict, viewer_id: Optional[str] = None, is_admin: bool = False) -> bool:
    """Pending/rejected listings are visible to their submitter and admins only."""
    if is_publicly_listable(prop) or is_admin:
        return True
    return viewer_id is not None and prop.get("submitted_by") == viewer_id


def prepare_submission(data: dict, submitter_id: str, now: Optional[datetime] = None) -> dict:
    """Row for a user submission: always enters moderation as pending."""
    row = {k: v for k, v in data.items() if k not in MODERATION_FIELDS}
    row.update({
        "featured": False,
        "approval_status": ApprovalStatus.pending.value,
        "submitted_by": submitter_id,
        "submission_date": (now or utc_now()).isoformat(),
        "approval_date": None,
        "rejection_reason": None,
    })
    return row


def prepare_admin_listing(data: dict, now: Optional[datetime] = None) -> dict:
    """Row for an admin-created listing: approved at write time, not by NULL."""
    row = {k: v for k, v in data.items() if k not in MODERATION_FIELDS}
    row.update({
        "approval_status": ApprovalStatus.approved.value,
        "approval_date": (now or utc_now()).isoformat(),
        "rejection_reason": None,
    })
    return row


def parse_status(value: str) -> ApprovalStatus:
    try:
        return ApprovalStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid approval status: {value}") from None


def count_by_status(properties: list[dict]) -> dict:
    counts = {"total": len(properties), "pending": 0, "approved": 0, "rejected": 0}
    for prop in properties:
        counts[effective_status(prop).value] += 1
    return counts


def public_listing_filter(query):
    """Restrict a properties query to publicly listable rows."""
    return query.or_(PUBLIC_VISIBILITY_FILTER)


# -----------------------------------------------------
# Writes
# -----------------------------------------------------
def submit_property(client: Client, data: dict, submitter_id: str, now: Optional[datetime] = None) -> dict:
    created = safe_insert(client, TABLE, prepare_submission(data, submitter_id, now))
    logger.info(f"Property submitted for review by {submitter_id}: {created and created.get('id')}")
    return created


def create_admin_listing(client: Client, data: dict, now: Optional[datetime] = None) -> dict:
    created = safe_insert(client, TABLE, prepare_admin_listing(data, now))
    logger.info(f"Admin listing created: {created and created.get('id')}")
    return created


def get_property(client: Client, property_id: str) -> dict:
    prop = fetch_one(client, TABLE, {"id": property_id})
    if not prop:
        raise NotFoundError("Property not found")
    return prop


def approve(client: Client, property_id: str, now: Optional[datetime] = None) -> dict:
    """
    pending/rejected → approved, stamping approval_date.
    Re-approving an approved property is a no-op success.
    """
    prop = get_property(client, property_id)
    if prop.get("approval_status") == ApprovalStatus.approved.value:
        return prop

    updated = safe_update(
        client,
        TABLE,
        {"id": property_id},
        {
            "approval_status": ApprovalStatus.approved.value,
            "approval_date": (now or utc_now()).isoformat(),
            "rejection_reason": None,
        },
    )
    if not updated:
        raise NotFoundError("Property not found")

    logger.info(f"Property {property_id} approved")
    return updated


def reject(client: Client, property_id: str, reason: Optional[str] = None, now: Optional[datetime] = None) -> dict:
    """→ rejected, stamping approval_date and the (optional) reason."""
    reason = reason.strip() if reason else None

    updated = safe_update(
        client,
        TABLE,
        {"id": property_id},
        {
            "approval_status": ApprovalStatus.rejected.value,
            "approval_date": (now or utc_now()).isoformat(),
            "rejection_reason": reason or None,
        },
    )
    if not updated:
        raise NotFoundError("Property not found")

    logger.info(f"Property {property_id} rejected")
    return updated


def update_listing(client: Client, property_id: str, changes: dict) -> dict:
    """
    Admin edit of listing content. Moderation fields only move through
    approve/reject and are refused here.
    """
    blocked = sorted(set(changes) & set(MODERATION_FIELDS))
    if blocked:
        raise ValidationError(f"Moderation fields cannot be edited: {', '.join(blocked)}")

    if not changes:
        return get_property(client, property_id)

    updated = safe_update(client, TABLE, {"id": property_id}, changes)
    if not updated:
        raise NotFoundError("Property not found")

    logger.info(f"Property {property_id} updated: {', '.join(sorted(changes))}")
    return updated


def set_featured(client: Client, property_id: str, featured: bool) -> dict:
    updated = safe_update(client, TABLE, {"id": property_id}, {"featured": featured})
    if not updated:
        raise NotFoundError("Property not found")
    return updated


def delete_property(client: Client, property_id: str) -> None:
    if not safe_delete(client, TABLE, {"id": property_id}):
        raise NotFoundError("Property not found")
    logger.info(f"Property {property_id} deleted")


# -----------------------------------------------------
# Reads
# -----------------------------------------------------
def list_public(
    client: Client,
    *,
    city: Optional[str] = None,
    property_type: Optional[str] = None,
    listing_type: Optional[str] = None,
    min_price: Optional[int] = None,
    max_price: Optional[int] = None,
    bedrooms: Optional[str] = None,
    featured: bool = False,
    limit: Optional[int] = None,
) -> list[dict]:
    query = public_listing_filter(client.table(TABLE).select("*"))

    if city:
        query = query.ilike("city", f"%{city}%")
    if property_type:
        query = query.eq("property_type", property_type)
    if listing_type:
        query = query.eq("listing_type", listing_type)
    if min_price is not None:
        query = query.gte("price", min_price)
    if max_price is not None:
        query = query.lte("price", max_price)
    if bedrooms:
        if bedrooms.endswith("+"):
            query = query.gte("bedrooms", _bedroom_count(bedrooms[:-1]))
        else:
            query = query.eq("bedrooms", _bedroom_count(bedrooms))
    if featured:
        query = query.eq("featured", True)

    try:
        result = (
            query.order("created_at", desc=True)
            .limit(limit or settings.PUBLIC_LISTING_LIMIT)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load properties") from e
    return result.data or []


def _bedroom_count(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ValidationError("bedrooms must be a number or e.g. '5+'") from None


def featured_properties(client: Client, limit: Optional[int] = None) -> list[dict]:
    """Featured listings, falling back to the newest listable ones."""
    limit = limit or settings.FEATURED_LISTING_LIMIT

    featured = list_public(client, featured=True, limit=limit)
    if featured:
        return featured

    latest = list_public(client, limit=limit)
    return [{**prop, "featured": True} for prop in latest]


def get_visible_property(client: Client, property_id: str, viewer_id: Optional[str] = None, is_admin: bool = False) -> dict:
    """
    Single property for a detail page. Hidden listings raise NotFound,
    not Forbidden, for anyone but the submitter and admins.
    """
    prop = fetch_one(client, TABLE, {"id": property_id})
    if not prop or not can_view(prop, viewer_id, is_admin):
        raise NotFoundError("Property not found")
    return prop


def similar_properties(client: Client, prop: dict, limit: Optional[int] = None) -> list[dict]:
    query = public_listing_filter(client.table(TABLE).select("*")).neq("id", prop["id"])
    if prop.get("city"):
        query = query.eq("city", prop["city"])
    if prop.get("property_type"):
        query = query.eq("property_type", prop["property_type"])

    try:
        result = query.limit(limit or settings.SIMILAR_LISTING_LIMIT).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load similar properties") from e
    return result.data or []


def submitter_dashboard(client: Client, submitter_id: str, status: Optional[str] = None) -> dict:
    """
    Everything a submitter has listed, whatever its status, with per-status
    counts. Rejection reasons are part of the rows.
    """
    try:
        result = (
            client.table(TABLE)
            .select("*")
            .eq("submitted_by", submitter_id)
            .order("submission_date", desc=True)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load your properties") from e

    properties = result.data or []
    counts = count_by_status(properties)

    if status and status != "all":
        wanted = parse_status(status)
        properties = [p for p in properties if effective_status(p) == wanted]

    return {"properties": properties, "counts": counts}


def approval_queue(client: Client, status: str = ApprovalStatus.pending.value) -> list[dict]:
    """Admin approvals tab: submissions in `status` with submitter details."""
    status = parse_status(status).value

    try:
        result = (
            client.table(TABLE)
            .select("*")
            .eq("approval_status", status)
            .order("submission_date", desc=True)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load approvals") from e

    properties = result.data or []
    submitter_ids = sorted({p["submitted_by"] for p in properties if p.get("submitted_by")})
    if not submitter_ids:
        return properties

    try:
        profiles = (
            client.table("user_profiles")
            .select("id, name, email, phone")
            .in_("id", submitter_ids)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load submitters") from e

    by_id = {row["id"]: row for row in profiles.data or []}
    for prop in properties:
        submitter = by_id.get(prop.get("submitted_by"))
        if submitter:
            prop["submitter"] = {k: submitter.get(k) for k in ("name", "email", "phone")}
    return properties
