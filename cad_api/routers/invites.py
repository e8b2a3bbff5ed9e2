"""Invite code endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from cad_api.dependencies import get_current_user, get_current_user_id, get_db_client
from cad_api.schemas.invite import InviteCodeCreate, InviteCodeResponse
from cad_api.services.invite_service import InviteService
from cad_api.utils.identifiers import parse_id
from supabase import Client

router = APIRouter()
community_router = APIRouter()


@community_router.post("", response_model=InviteCodeResponse)
def create_invite_code(
    community_id: str,
    payload: InviteCodeCreate,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Create an invite code for a community (owner only)."""
    service = InviteService(client)
    return service.create(
        community_id=parse_id(community_id, "communityId"),
        created_by=get_current_user_id(user),
        max_uses=payload.max_uses,
        expires_at=payload.expires_at,
    )


@community_router.get("", response_model=list[InviteCodeResponse])
def list_invite_codes(
    community_id: str,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> list[dict]:
    """List a community's invite codes (owner only)."""
    service = InviteService(client)
    return service.list_for_community(
        parse_id(community_id, "communityId"), get_current_user_id(user)
    )


@router.get("", response_model=InviteCodeResponse)
def get_invite_code(
    code: str = "",
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Look up an invite code by its token."""
    return InviteService(client).get_by_code(code)


@router.delete("/{invite_id}")
def revoke_invite_code(
    invite_id: str,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Delete an invite code (community owner only)."""
    InviteService(client).revoke(parse_id(invite_id, "inviteId"), get_current_user_id(user))
    return {"message": "Invite code revoked"}
