"""Community creation, lookup and deletion."""

from __future__ import annotations

import logging
from typing import Any

from cad_api.services.common import COMMUNITIES, SupabaseService
from cad_api.services.membership import MembershipEvent
from cad_api.services.membership_service import MembershipService
from cad_api.utils.errors import NotFoundError
from cad_api.utils.time import now_utc
from supabase import Client

logger = logging.getLogger(__name__)


class CommunityService:
    """Community lifecycle logic."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)
        self.memberships = MembershipService(client)

    def get(self, community_id: str) -> dict[str, Any]:
        """Return one community."""
        return self.db.get_community(community_id)

    def create(self, owner_id: str, name: str, image_link: str | None = None) -> dict[str, Any]:
        """Create a community and approve its owner as the first member."""
        community = self.db.insert_one(
            COMMUNITIES,
            {
                "name": name,
                "image_link": image_link,
                "owner_id": owner_id,
                "ban_list": [],
                "members_count": 0,
                "created_at": now_utc().isoformat(),
            },
        )
        community, _ = self.memberships.apply_to(owner_id, community, MembershipEvent.APPROVE)
        logger.info("Community %s created by %s", community["id"], owner_id)
        return community

    def delete(self, community_id: str, user_id: str) -> dict[str, Any]:
        """Delete a community; memberships and invite codes cascade (owner only)."""
        community = self.db.get_community(community_id)
        self.db.ensure_community_owner(community, user_id)
        removed = self.db.delete(COMMUNITIES, {"id": community_id})
        if not removed:
            raise NotFoundError("Community")
        logger.info("Community %s deleted by %s", community_id, user_id)
        return removed[0]
