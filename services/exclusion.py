# services/exclusion.py

"""
Lead-list exclusion.

Admins and staff also authenticate against Supabase and may have
user_profiles rows. Lead views and exports must never include them, so the
lead list is only ever produced after the exclusion set has been loaded.
"""

from typing import Iterable, Optional

from supabase import Client

from core.errors import ExclusionFetchError, handle_supabase_error
from core.logging_config import logger
from models.exclusion import ExcludedIds


def compute_lead_list(profiles: Iterable[dict], excluded: ExcludedIds) -> list[dict]:
    excluded_ids = excluded.all_ids()
    return [p for p in profiles if p.get("id") not in excluded_ids]


def fetch_excluded_ids(client: Client) -> ExcludedIds:
    """Ids in the admins and crm_staff tables (active or not)."""
    try:
        admins = client.table("admins").select("id").execute()
        staff = client.table("crm_staff").select("id").execute()
    except Exception as e:
        logger.error(f"Failed to fetch excluded ids: {type(e).__name__}")
        raise ExclusionFetchError() from e

    if admins is None or staff is None:
        raise ExclusionFetchError()

    return ExcludedIds(
        admin_ids=[row["id"] for row in admins.data or []],
        staff_ids=[row["id"] for row in staff.data or []],
    )


def _matches_search(profile: dict, search: str) -> bool:
    needle = search.lower()
    return (
        needle in (profile.get("name") or "").lower()
        or needle in (profile.get("email") or "").lower()
        or search in (profile.get("phone") or "")
    )


def _matches_residency(profile: dict, residency: str) -> bool:
    if residency == "nri":
        return bool(profile.get("is_nri"))
    if residency == "indian":
        return not profile.get("is_nri")
    return True


def load_leads(
    client: Client,
    *,
    search: Optional[str] = None,
    residency: str = "all",
    fetch_excluded=fetch_excluded_ids,
) -> list[dict]:
    """
    Lead list for the admin leads view.
    Raises ExclusionFetchError instead of ever returning an unfiltered list.
    """
    excluded = fetch_excluded(client)

    try:
        result = (
            client.table("user_profiles")
            .select("*")
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load leads") from e

    leads = compute_lead_list(result.data or [], excluded)

    if search:
        leads = [p for p in leads if _matches_search(p, search.strip())]
    if residency and residency != "all":
        leads = [p for p in leads if _matches_residency(p, residency)]
    return leads
