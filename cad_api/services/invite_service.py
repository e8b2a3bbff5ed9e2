"""Invite code creation, lookup and redemption logic."""

from __future__ import annotations

import logging
import secrets
import string
from datetime import datetime
from typing import Any, NoReturn

from cad_api.config import settings
from cad_api.services.common import INVITE_CODES, SupabaseService
from cad_api.utils.errors import (
    ConflictError,
    ExpiredInviteError,
    InvalidInputError,
    InvalidInviteError,
    NotFoundError,
)
from cad_api.utils.time import is_expired, now_utc
from supabase import Client

ALPHABET = string.ascii_uppercase + string.digits
MAX_CODE_ATTEMPTS = 100
UNLIMITED_USES = -1

logger = logging.getLogger(__name__)


def normalize_code(code: str | None) -> str:
    """Return the canonical form of a user-submitted invite code."""
    return (code or "").strip().upper()


def random_code(length: int) -> str:
    """Return an uppercase alphanumeric code."""
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def initial_remaining_uses(max_uses: int) -> int:
    """Return the starting use budget; ``max_uses == 0`` means unlimited."""
    return UNLIMITED_USES if max_uses == 0 else max_uses


class InviteService:
    """Invite code lookup, creation and one-use consumption."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)

    def consume(self, code: str) -> dict[str, Any]:
        """Atomically consume one use of an invite code and return the updated row.

        The lookup and the decrement are a single store operation, so two
        redeemers can never both take the last use. The expiry check runs
        after the use is taken and does not refund it.
        """
        normalized_code = normalize_code(code)
        if not normalized_code:
            raise InvalidInputError("Invite code is required")

        invite = self.db.consume_invite_code(
            normalized_code,
            legacy_guard=settings.invite_legacy_exhaustion_guard,
        )
        if invite is None:
            self._raise_unavailable(normalized_code)

        if is_expired(invite.get("expires_at")):
            logger.warning("Expired invite code %s redeemed, use not refunded", invite["id"])
            raise ExpiredInviteError()
        return invite

    def _raise_unavailable(self, code: str) -> NoReturn:
        rows = self.db.select_many(INVITE_CODES, filters={"code": code}, limit=1)
        if rows and is_expired(rows[0].get("expires_at")):
            raise ExpiredInviteError()
        raise InvalidInviteError()

    def get_by_code(self, code: str) -> dict[str, Any]:
        """Return an invite code by its token."""
        normalized_code = normalize_code(code)
        if not normalized_code:
            raise InvalidInputError("Invite code is required")
        return self.db.select_one(
            INVITE_CODES, {"code": normalized_code}, not_found_label="Invite code"
        )

    def list_for_community(self, community_id: str, user_id: str) -> list[dict[str, Any]]:
        """Return a community's invite codes, newest first."""
        community = self.db.get_community(community_id)
        self.db.ensure_community_owner(community, user_id)
        return self.db.select_many(
            INVITE_CODES,
            filters={"community_id": community_id},
            order_by="created_at",
            descending=True,
        )

    def create(
        self,
        community_id: str,
        created_by: str,
        max_uses: int = 0,
        expires_at: datetime | None = None,
    ) -> dict[str, Any]:
        """Create a unique invite code for a community."""
        if max_uses < 0:
            raise InvalidInputError("maxUses must be >= 0")
        if expires_at is not None and is_expired(expires_at):
            raise InvalidInputError("expiresAt must be in the future")

        community = self.db.get_community(community_id)
        self.db.ensure_community_owner(community, created_by)

        for _attempt in range(MAX_CODE_ATTEMPTS):
            payload = {
                "code": random_code(settings.invite_code_length),
                "community_id": community_id,
                "expires_at": expires_at.isoformat() if expires_at else None,
                "max_uses": max_uses,
                "remaining_uses": initial_remaining_uses(max_uses),
                "uses": 0,
                "created_by": created_by,
                "created_at": now_utc().isoformat(),
            }
            try:
                invite = self.db.insert_one(INVITE_CODES, payload)
            except ConflictError as exc:
                if exc.code == "DUPLICATE":
                    continue
                raise
            logger.info(
                "Invite code %s created for community %s (max_uses=%s)",
                invite["id"],
                community_id,
                max_uses,
            )
            return invite

        raise ConflictError(
            f"Failed to generate a unique invite code after {MAX_CODE_ATTEMPTS} attempts"
        )

    def revoke(self, invite_id: str, user_id: str) -> dict[str, Any]:
        """Delete an invite code; only the community owner may do this."""
        invite = self.db.select_one(INVITE_CODES, {"id": invite_id}, not_found_label="Invite code")
        community = self.db.get_community(str(invite["community_id"]))
        self.db.ensure_community_owner(community, user_id)
        removed = self.db.delete(INVITE_CODES, {"id": invite_id})
        if not removed:
            raise NotFoundError("Invite code")
        return removed[0]
