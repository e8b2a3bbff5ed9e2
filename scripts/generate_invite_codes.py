"""Generate random invite codes for a community and insert them into Supabase."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from datetime import timedelta
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def parse_args() -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Create random invite codes in public.invite_codes.",
    )
    parser.add_argument(
        "community_id",
        type=str,
        help="Community the codes grant membership to.",
    )
    parser.add_argument(
        "count",
        type=int,
        help="How many invite codes to generate.",
    )
    parser.add_argument(
        "--owner-id",
        type=str,
        required=True,
        help="Community owner id recorded as the creator.",
    )
    parser.add_argument(
        "--max-uses",
        type=int,
        default=0,
        help="Uses per code; 0 means unlimited (default: 0).",
    )
    parser.add_argument(
        "--expires-in-days",
        type=int,
        default=None,
        help="Expire codes this many days from now (default: never).",
    )
    return parser.parse_args()


def create_codes(
    community_id: str,
    owner_id: str,
    count: int,
    max_uses: int,
    expires_in_days: int | None,
) -> list[str]:
    """Insert ``count`` unique invite codes and return them."""
    if count <= 0:
        raise ValueError("count must be >= 1")
    if expires_in_days is not None and expires_in_days <= 0:
        raise ValueError("expires-in-days must be >= 1")

    from cad_api.services.invite_service import InviteService
    from cad_api.utils.identifiers import parse_id
    from cad_api.utils.supabase_client import get_service_client
    from cad_api.utils.time import now_utc

    service = InviteService(get_service_client())
    expires_at = now_utc() + timedelta(days=expires_in_days) if expires_in_days else None
    community_id = parse_id(community_id, "community_id")

    generated: list[str] = []
    for _ in range(count):
        invite = service.create(
            community_id=community_id,
            created_by=owner_id,
            max_uses=max_uses,
            expires_at=expires_at,
        )
        generated.append(str(invite["code"]))
    return generated


def print_codes(codes: Sequence[str]) -> None:
    """Print generated codes in copy-friendly form."""
    print(f"Generated {len(codes)} invite code(s):")
    for code in codes:
        print(code)


def main() -> None:
    """CLI entry point."""
    args = parse_args()
    codes = create_codes(
        community_id=args.community_id,
        owner_id=args.owner_id,
        count=args.count,
        max_uses=args.max_uses,
        expires_in_days=args.expires_in_days,
    )
    print_codes(codes)


if __name__ == "__main__":
    main()
