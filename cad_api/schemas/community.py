"""Community and membership schemas."""

from datetime import datetime

from pydantic import Field

from cad_api.schemas.common import CamelModel


class CommunityCreate(CamelModel):
    """Request body for creating a community."""

    name: str = Field(..., min_length=1, max_length=100)
    image_link: str | None = Field(None, max_length=2048)


class CommunityResponse(CamelModel):
    """Community representation."""

    id: str
    name: str
    image_link: str | None = None
    owner_id: str
    ban_list: list[str] = []
    members_count: int = 0
    created_at: datetime | None = None


class CommunitySummary(CamelModel):
    """Public subset of a community returned after joining."""

    id: str
    name: str | None = None
    image_link: str | None = None


class JoinCommunityRequest(CamelModel):
    """Request body for joining via invite code."""

    invite_code: str = Field(..., min_length=1, max_length=64)


class JoinCommunityResponse(CamelModel):
    """Result of a successful invite redemption."""

    status: str = "joined"
    community_id: str
    community: CommunitySummary


class MembershipResponse(CamelModel):
    """One user's relationship to one community."""

    id: str
    user_id: str
    community_id: str
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BannedUsersResponse(CamelModel):
    """Ban list of a community."""

    community_id: str
    banned_user_ids: list[str]
