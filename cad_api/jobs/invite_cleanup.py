"""Expired invite code cleanup job."""

from __future__ import annotations

import logging

from cad_api.config import settings
from cad_api.services.common import INVITE_CODES, SupabaseService
from cad_api.utils.supabase_client import get_service_client
from cad_api.utils.time import days_ago

logger = logging.getLogger(__name__)


def purge_expired_invite_codes(db: SupabaseService, retention_days: int) -> int:
    """Delete invite codes that expired more than ``retention_days`` ago."""
    cutoff = days_ago(max(0, retention_days)).isoformat()
    removed = db.execute(
        db.client.table(INVITE_CODES).delete().lt("expires_at", cutoff),
        default=[],
    )
    return len(removed)


async def invite_code_cleanup() -> None:
    """Remove long-expired invite codes."""
    db = SupabaseService(get_service_client())
    removed = purge_expired_invite_codes(db, settings.invite_cleanup_retention_days)
    logger.info("invite_code_cleanup removed %s expired invite codes", removed)
