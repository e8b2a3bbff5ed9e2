"""Shared Supabase data access helpers."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx
from postgrest import APIError

from cad_api.config import settings
from cad_api.utils.errors import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    StoreUnavailableError,
)
from supabase import Client

logger = logging.getLogger(__name__)

COMMUNITIES = "communities"
MEMBERSHIPS = "community_memberships"
INVITE_CODES = "invite_codes"
USERS = "users"


def map_api_error(exc: APIError) -> Exception:
    """Translate a PostgREST error into an application error.

    SQLSTATE class 22 is bad data, class 23 is an integrity violation; anything
    else is treated as the store being unavailable.
    """
    message = str(getattr(exc, "message", None) or "Database request failed")
    code = str(getattr(exc, "code", None) or "")
    if code == "23505":
        return ConflictError(message, code="DUPLICATE")
    if code.startswith("23"):
        return ConflictError(message)
    if code.startswith("22"):
        return InvalidInputError(message)
    return StoreUnavailableError(message)


class SupabaseService:
    """Thin helper wrapper around a Supabase client."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def execute(self, query, default: Any = None) -> Any:
        """Execute a Supabase query and normalize API errors."""
        started = time.perf_counter()
        try:
            response = query.execute()
        except APIError as exc:
            raise map_api_error(exc) from exc
        except httpx.HTTPError as exc:
            logger.warning("Supabase transport error: %s", exc)
            raise StoreUnavailableError() from exc

        elapsed_ms = (time.perf_counter() - started) * 1000
        threshold_ms = settings.slow_query_log_threshold_ms
        if threshold_ms > 0 and elapsed_ms >= threshold_ms:
            logger.warning("Slow Supabase query %.1fms", elapsed_ms)
        data = response.data
        return default if data is None and default is not None else data

    def rpc(self, function: str, params: dict[str, Any], default: Any = None) -> Any:
        """Call a Postgres function through PostgREST."""
        return self.execute(self.client.rpc(function, params), default=default)

    def select_one(
        self,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
        not_found_label: str | None = None,
    ) -> dict[str, Any]:
        """Select a single row and raise NotFoundError when missing."""
        query = self.client.table(table).select(columns)
        for key, value in filters.items():
            query = query.eq(key, value)
        rows = self.execute(query.limit(1), default=[])
        if not rows:
            label = not_found_label or table
            raise NotFoundError(label)
        return rows[0]

    def select_many(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        columns: str = "*",
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Select many rows from a table with optional filters."""
        query = self.client.table(table).select(columns)
        if filters:
            for key, value in filters.items():
                query = query.eq(key, value)
        if order_by:
            query = query.order(order_by, desc=descending)
        if limit:
            query = query.limit(limit)
        return self.execute(query, default=[])

    def insert_one(self, table: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return the created object."""
        rows = self.execute(self.client.table(table).insert(payload), default=[])
        if not rows:
            raise StoreUnavailableError(f"Failed to insert into {table}")
        return rows[0]

    def update(
        self,
        table: str,
        filters: dict[str, Any],
        payload: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """Update rows by equality filters and return the updated rows."""
        query = self.client.table(table).update(payload)
        for key, value in filters.items():
            query = query.eq(key, value)
        return self.execute(query, default=[])

    def delete(self, table: str, filters: dict[str, Any]) -> list[dict[str, Any]]:
        """Delete rows by equality filters and return removed rows."""
        query = self.client.table(table).delete()
        for key, value in filters.items():
            query = query.eq(key, value)
        return self.execute(query, default=[])

    def get_user(self, user_id: str) -> dict[str, Any]:
        """Return a public user record."""
        return self.select_one(USERS, {"id": user_id}, not_found_label="User")

    def get_community(self, community_id: str) -> dict[str, Any]:
        """Return a community row."""
        return self.select_one(COMMUNITIES, {"id": community_id}, not_found_label="Community")

    def ensure_community_owner(self, community: dict[str, Any], user_id: str) -> None:
        """Raise ForbiddenError unless ``user_id`` owns ``community``."""
        if str(community.get("owner_id")) != str(user_id):
            raise ForbiddenError("Only the community owner can do this")

    def list_memberships(self, user_id: str) -> list[dict[str, Any]]:
        """Return every membership record a user holds, in one read."""
        return self.select_many(MEMBERSHIPS, filters={"user_id": user_id}, order_by="created_at")

    # Atomic store functions. Each is a single statement on the database side,
    # so concurrent callers are serialized by row locks.

    def consume_invite_code(self, code: str, legacy_guard: bool = False) -> dict[str, Any] | None:
        """Consume one use of ``code`` and return the updated row, if any matched."""
        rows = self.rpc(
            "consume_invite_code",
            {"p_code": code, "p_legacy_guard": legacy_guard},
            default=[],
        )
        return rows[0] if rows else None

    def increment_members_count(self, community_id: str, delta: int) -> int:
        """Add ``delta`` to a community's member counter and return the new value."""
        value = self.rpc(
            "increment_members_count",
            {"p_community_id": community_id, "p_delta": delta},
        )
        if value is None:
            raise NotFoundError("Community")
        return int(value)

    def add_to_ban_list(self, community_id: str, user_id: str) -> None:
        """Add a user id to the community ban list if absent."""
        self.rpc("add_to_ban_list", {"p_community_id": community_id, "p_user_id": user_id})

    def remove_from_ban_list(self, community_id: str, user_id: str) -> None:
        """Remove a user id from the community ban list."""
        self.rpc(
            "remove_from_ban_list",
            {"p_community_id": community_id, "p_user_id": user_id},
        )


def community_summary(community: dict[str, Any]) -> dict[str, Any]:
    """Return the public subset of a community row."""
    return {
        "id": str(community["id"]),
        "name": community.get("name"),
        "image_link": community.get("image_link"),
    }
