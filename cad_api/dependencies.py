"""FastAPI dependency injection helpers."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Any

from fastapi import Header

from cad_api.config import settings
from cad_api.utils.errors import UnauthorizedError
from cad_api.utils.supabase_client import get_service_client, get_supabase_client
from supabase import Client


class TokenCache:
    """Bounded TTL cache of validated access tokens.

    When full, the entry inserted first is evicted.
    """

    def __init__(self) -> None:
        self._entries: OrderedDict[str, tuple[float, Any]] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, token: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(token)
            if entry is None:
                return None
            expires_at, user = entry
            if expires_at <= time.monotonic():
                del self._entries[token]
                return None
            return user

    def put(self, token: str, user: Any) -> None:
        ttl_seconds = settings.auth_token_cache_ttl_seconds
        if ttl_seconds <= 0:
            return
        with self._lock:
            self._entries.pop(token, None)
            while len(self._entries) >= max(1, settings.auth_token_cache_max_entries):
                self._entries.popitem(last=False)
            self._entries[token] = (time.monotonic() + ttl_seconds, user)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


token_cache = TokenCache()


def get_current_user(authorization: str = Header(None)) -> Any:
    """Extract and validate a Supabase JWT from the Authorization header.

    Raises:
        UnauthorizedError: 401 if the header is missing, malformed, or
            the token cannot be validated.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthorizedError("Missing authorization header")

    token = authorization.split(" ", 1)[1].strip()
    cached_user = token_cache.get(token)
    if cached_user is not None:
        return cached_user

    try:
        response = get_supabase_client().auth.get_user(token)
    except Exception as exc:
        raise UnauthorizedError("Invalid or expired token") from exc
    if not response or not response.user:
        raise UnauthorizedError("Invalid token")

    token_cache.put(token, response.user)
    return response.user


def get_current_user_id(user: Any) -> str:
    """Extract a stable user id string from the Supabase user object."""
    return str(user.id)


def get_db_client() -> Client:
    """Return the privileged Supabase client used by backend services."""
    return get_service_client()
