"""Current-user endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from cad_api.dependencies import get_current_user, get_current_user_id, get_db_client
from cad_api.schemas.community import MembershipResponse
from cad_api.services.membership_service import MembershipService
from supabase import Client

router = APIRouter()


@router.get("/me/communities", response_model=list[MembershipResponse])
def list_my_communities(
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> list[dict]:
    """Return the caller's community memberships."""
    return MembershipService(client).list_for_user(get_current_user_id(user))
