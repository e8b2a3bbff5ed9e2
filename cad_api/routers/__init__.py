"""API router package."""

from cad_api.routers import communities, invites, users

__all__ = [
    "communities",
    "invites",
    "users",
]
