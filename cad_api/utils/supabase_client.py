"""Supabase client factory.

Two cached clients exist: the anon-key client validates user access tokens,
the service-role client does every data access (authorization lives in the
service layer).
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

import httpx
from supabase.lib.client_options import SyncClientOptions

from cad_api.config import settings
from supabase import Client, create_client

ClientRole = Literal["anon", "service"]


def _pool_limits() -> httpx.Limits:
    max_connections = max(10, settings.supabase_http_max_connections)
    return httpx.Limits(
        max_connections=max_connections,
        max_keepalive_connections=max(
            5, min(max_connections, settings.supabase_http_max_keepalive_connections)
        ),
    )


def _client_options() -> SyncClientOptions:
    timeout_seconds = max(1, settings.supabase_postgrest_timeout_seconds)
    return SyncClientOptions(
        auto_refresh_token=False,
        persist_session=False,
        postgrest_client_timeout=timeout_seconds,
        storage_client_timeout=timeout_seconds,
        function_client_timeout=min(timeout_seconds, 30),
        httpx_client=httpx.Client(
            timeout=httpx.Timeout(timeout_seconds),
            limits=_pool_limits(),
        ),
    )


@lru_cache(maxsize=2)
def get_client(role: ClientRole) -> Client:
    """Return the shared client for ``role``."""
    key = settings.supabase_service_key if role == "service" else settings.supabase_anon_key
    return create_client(settings.supabase_url, key, options=_client_options())


def get_supabase_client() -> Client:
    """Return the anon-key client used to validate user tokens."""
    return get_client("anon")


def get_service_client() -> Client:
    """Return the service-role client (bypasses RLS)."""
    return get_client("service")
