"""Community membership persistence and the invite join flow."""

from __future__ import annotations

import logging
from typing import Any

from cad_api.services.common import MEMBERSHIPS, SupabaseService, community_summary
from cad_api.services.invite_service import InviteService
from cad_api.services.membership import (
    Effect,
    MembershipEvent,
    Transition,
    find_record,
    state_of,
    transition,
)
from cad_api.utils.errors import InvalidInputError
from cad_api.utils.identifiers import new_id
from cad_api.utils.time import now_utc
from supabase import Client

logger = logging.getLogger(__name__)


def is_on_ban_list(community: dict[str, Any], user_id: str) -> bool:
    """Return True when ``user_id`` is in the community ban list."""
    return str(user_id) in {str(value) for value in community.get("ban_list") or []}


class MembershipService:
    """Applies membership events to users and communities."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)
        self.invites = InviteService(client)

    def apply(
        self,
        user_id: str,
        community_id: str,
        event: MembershipEvent,
    ) -> tuple[dict[str, Any], dict[str, Any] | None]:
        """Apply ``event`` for a user and return the community and resulting record."""
        community = self.db.get_community(community_id)
        return self.apply_to(user_id, community, event)

    def apply_to(
        self,
        user_id: str,
        community: dict[str, Any],
        event: MembershipEvent,
    ) -> tuple[dict[str, Any], dict[str, Any] | None]:
        """Apply ``event`` against an already loaded community row."""
        community_id = str(community["id"])
        # One read of the whole list decides absent vs existing; record writes
        # after it are last-write-wins.
        record = find_record(self.db.list_memberships(user_id), community_id)
        result = transition(
            state_of(record),
            event,
            on_ban_list=is_on_ban_list(community, user_id),
        )
        if result.is_noop:
            return community, record

        record = self._apply_effects(user_id, community, record, result)
        logger.debug(
            "Membership %s for user %s in community %s -> %s",
            event.value,
            user_id,
            community_id,
            result.state.value,
        )
        return community, record

    def _apply_effects(
        self,
        user_id: str,
        community: dict[str, Any],
        record: dict[str, Any] | None,
        result: Transition,
    ) -> dict[str, Any] | None:
        community_id = str(community["id"])
        for effect in result.effects:
            if effect is Effect.CREATE_RECORD:
                timestamp = now_utc().isoformat()
                record = self.db.insert_one(
                    MEMBERSHIPS,
                    {
                        "id": new_id(),
                        "user_id": user_id,
                        "community_id": community_id,
                        "status": result.status,
                        "created_at": timestamp,
                        "updated_at": timestamp,
                    },
                )
            elif effect is Effect.UPDATE_RECORD and record is not None:
                rows = self.db.update(
                    MEMBERSHIPS,
                    {"id": record["id"]},
                    {"status": result.status, "updated_at": now_utc().isoformat()},
                )
                record = rows[0] if rows else {**record, "status": result.status}
            elif effect is Effect.DELETE_RECORD and record is not None:
                self.db.delete(MEMBERSHIPS, {"id": record["id"]})
                record = None
            elif effect is Effect.INCREMENT_MEMBERS:
                community["members_count"] = self.db.increment_members_count(community_id, 1)
            elif effect is Effect.DECREMENT_MEMBERS:
                community["members_count"] = self.db.increment_members_count(community_id, -1)
            elif effect is Effect.ADD_TO_BAN_LIST:
                self.db.add_to_ban_list(community_id, user_id)
                ban_list = [str(value) for value in community.get("ban_list") or []]
                if str(user_id) not in ban_list:
                    ban_list.append(str(user_id))
                community["ban_list"] = ban_list
            elif effect is Effect.REMOVE_FROM_BAN_LIST:
                self.db.remove_from_ban_list(community_id, user_id)
                community["ban_list"] = [
                    value for value in community.get("ban_list") or [] if str(value) != str(user_id)
                ]
        return record

    def join(self, invite_code: str, user_id: str) -> dict[str, Any]:
        """Redeem an invite code and make the user an approved member.

        Consuming the invite and updating the membership are separate writes; a
        failure after the consume does not give the use back.
        """
        self.db.get_user(user_id)
        invite = self.invites.consume(invite_code)
        community_id = str(invite["community_id"])
        community, _ = self.apply(user_id, community_id, MembershipEvent.REDEEM_INVITE)
        logger.info(
            "User %s joined community %s with invite %s", user_id, community_id, invite["id"]
        )
        return {
            "status": "joined",
            "community_id": community_id,
            "community": community_summary(community),
        }

    def request_to_join(self, user_id: str, community_id: str) -> dict[str, Any] | None:
        """Open (or re-open) a pending join request."""
        _, record = self.apply(user_id, community_id, MembershipEvent.REQUEST)
        return record

    def leave(self, user_id: str, community_id: str) -> None:
        """Remove the user's membership record for a community."""
        self.apply(user_id, community_id, MembershipEvent.LEAVE)
        logger.info("User %s left community %s", user_id, community_id)

    def _moderate(
        self,
        actor_id: str,
        community_id: str,
        user_id: str,
        event: MembershipEvent,
    ) -> tuple[dict[str, Any], dict[str, Any] | None]:
        community = self.db.get_community(community_id)
        self.db.ensure_community_owner(community, actor_id)
        self.db.get_user(user_id)
        return self.apply_to(user_id, community, event)

    def approve(self, actor_id: str, community_id: str, user_id: str) -> dict[str, Any] | None:
        """Approve a user's membership (owner only)."""
        _, record = self._moderate(actor_id, community_id, user_id, MembershipEvent.APPROVE)
        return record

    def decline(self, actor_id: str, community_id: str, user_id: str) -> dict[str, Any] | None:
        """Decline a pending request (owner only)."""
        _, record = self._moderate(actor_id, community_id, user_id, MembershipEvent.DECLINE)
        return record

    def ban(self, actor_id: str, community_id: str, user_id: str) -> dict[str, Any] | None:
        """Ban a user from a community (owner only)."""
        if str(actor_id) == str(user_id):
            raise InvalidInputError("The community owner cannot be banned")
        _, record = self._moderate(actor_id, community_id, user_id, MembershipEvent.BAN)
        logger.info("User %s banned from community %s by %s", user_id, community_id, actor_id)
        return record

    def unban(self, actor_id: str, community_id: str, user_id: str) -> None:
        """Lift a ban; the user has no membership afterwards (owner only)."""
        self._moderate(actor_id, community_id, user_id, MembershipEvent.UNBAN)
        logger.info("User %s unbanned from community %s by %s", user_id, community_id, actor_id)

    def list_for_user(self, user_id: str) -> list[dict[str, Any]]:
        """Return the user's membership records."""
        return self.db.list_memberships(user_id)

    def list_members(self, community_id: str, status: str | None = None) -> list[dict[str, Any]]:
        """Return a community's membership records, optionally filtered by status."""
        self.db.get_community(community_id)
        filters: dict[str, Any] = {"community_id": community_id}
        if status:
            filters["status"] = status
        return self.db.select_many(MEMBERSHIPS, filters=filters, order_by="created_at")

    def list_banned(self, actor_id: str, community_id: str) -> list[str]:
        """Return the community ban list (owner only)."""
        community = self.db.get_community(community_id)
        self.db.ensure_community_owner(community, actor_id)
        return [str(value) for value in community.get("ban_list") or []]
