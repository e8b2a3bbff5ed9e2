"""Background job modules for periodic maintenance tasks."""

from cad_api.jobs.invite_cleanup import invite_code_cleanup

__all__ = [
    "invite_code_cleanup",
]
