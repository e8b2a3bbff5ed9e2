"""Invite code schemas."""

from datetime import datetime

from pydantic import Field

from cad_api.schemas.common import CamelModel


class InviteCodeCreate(CamelModel):
    """Request body for creating an invite code.

    ``max_uses == 0`` creates an unlimited code.
    """

    max_uses: int = Field(0, ge=0)
    expires_at: datetime | None = None


class InviteCodeResponse(CamelModel):
    """Invite code representation."""

    id: str
    code: str
    community_id: str
    expires_at: datetime | None = None
    max_uses: int
    remaining_uses: int
    uses: int = 0
    created_by: str
    created_at: datetime | None = None
