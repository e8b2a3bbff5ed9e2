"""Community and membership endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from cad_api.dependencies import get_current_user, get_current_user_id, get_db_client
from cad_api.schemas.community import (
    BannedUsersResponse,
    CommunityCreate,
    CommunityResponse,
    JoinCommunityRequest,
    JoinCommunityResponse,
    MembershipResponse,
)
from cad_api.services.community_service import CommunityService
from cad_api.services.membership_service import MembershipService
from cad_api.utils.identifiers import parse_id
from supabase import Client

router = APIRouter()


@router.post("", response_model=CommunityResponse)
def create_community(
    payload: CommunityCreate,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Create a community owned by the current user."""
    service = CommunityService(client)
    return service.create(
        owner_id=get_current_user_id(user),
        name=payload.name,
        image_link=payload.image_link,
    )


@router.post("/join", response_model=JoinCommunityResponse)
def join_community(
    payload: JoinCommunityRequest,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Join a community by redeeming an invite code."""
    service = MembershipService(client)
    return service.join(
        invite_code=payload.invite_code,
        user_id=get_current_user_id(user),
    )


@router.get("/{community_id}", response_model=CommunityResponse)
def get_community(
    community_id: str,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return one community."""
    return CommunityService(client).get(parse_id(community_id, "communityId"))


@router.delete("/{community_id}")
def delete_community(
    community_id: str,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Delete a community (owner only)."""
    service = CommunityService(client)
    service.delete(parse_id(community_id, "communityId"), get_current_user_id(user))
    return {"message": "Community deleted successfully"}


@router.post("/{community_id}/requests", response_model=MembershipResponse)
def request_to_join(
    community_id: str,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Ask to join a community; the owner approves or declines."""
    service = MembershipService(client)
    return service.request_to_join(
        get_current_user_id(user), parse_id(community_id, "communityId")
    )


@router.delete("/{community_id}/membership")
def leave_community(
    community_id: str,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Leave a community."""
    MembershipService(client).leave(
        get_current_user_id(user), parse_id(community_id, "communityId")
    )
    return {"message": "Community membership removed"}


@router.get("/{community_id}/members", response_model=list[MembershipResponse])
def list_members(
    community_id: str,
    status: str | None = None,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> list[dict]:
    """List membership records for a community."""
    return MembershipService(client).list_members(parse_id(community_id, "communityId"), status)


@router.get("/{community_id}/banned", response_model=BannedUsersResponse)
def list_banned_users(
    community_id: str,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return the community ban list (owner only)."""
    cid = parse_id(community_id, "communityId")
    banned = MembershipService(client).list_banned(get_current_user_id(user), cid)
    return {"community_id": cid, "banned_user_ids": banned}


@router.post("/{community_id}/members/{user_id}/approve", response_model=MembershipResponse)
def approve_member(
    community_id: str,
    user_id: str,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Approve a user's membership (owner only)."""
    return MembershipService(client).approve(
        get_current_user_id(user),
        parse_id(community_id, "communityId"),
        parse_id(user_id, "userId"),
    )


@router.post("/{community_id}/members/{user_id}/decline", response_model=MembershipResponse)
def decline_member(
    community_id: str,
    user_id: str,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Decline a pending join request (owner only)."""
    return MembershipService(client).decline(
        get_current_user_id(user),
        parse_id(community_id, "communityId"),
        parse_id(user_id, "userId"),
    )


@router.post("/{community_id}/members/{user_id}/ban")
def ban_member(
    community_id: str,
    user_id: str,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Ban a user from a community (owner only)."""
    MembershipService(client).ban(
        get_current_user_id(user),
        parse_id(community_id, "communityId"),
        parse_id(user_id, "userId"),
    )
    return {"message": "User banned from community successfully"}


@router.delete("/{community_id}/members/{user_id}/ban")
def unban_member(
    community_id: str,
    user_id: str,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Lift a user's ban (owner only)."""
    MembershipService(client).unban(
        get_current_user_id(user),
        parse_id(community_id, "communityId"),
        parse_id(user_id, "userId"),
    )
    return {"message": "User unbanned from community successfully"}
