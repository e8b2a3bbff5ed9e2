"""Checks that the SQL migration and the in-memory store agree."""

from __future__ import annotations

import re
from pathlib import Path

import pytest

from fakes import FakeSupabaseClient

MIGRATIONS = Path(__file__).resolve().parents[1] / "supabase" / "migrations"


def _function_body(name: str) -> str:
    sql = "\n".join(path.read_text() for path in sorted(MIGRATIONS.glob("*.sql")))
    match = re.search(
        rf"function public\.{name}\(.*?\$\$(.*?)\$\$",
        sql,
        flags=re.DOTALL | re.IGNORECASE,
    )
    assert match, f"{name} not found in migrations"
    return " ".join(match.group(1).split())


def test_consume_guard_clauses_are_present() -> None:
    """The SQL guard has the unlimited, positive and legacy branches."""
    body = _function_body("consume_invite_code")

    assert "remaining_uses = -1" in body
    assert "or remaining_uses >= 1" in body
    assert "or (p_legacy_guard and remaining_uses >= -1)" in body
    assert "case when remaining_uses = -1 then -1 else remaining_uses - 1 end" in body


def _sql_guard(remaining: int, legacy: bool) -> bool:
    return remaining == -1 or remaining >= 1 or (legacy and remaining >= -1)


@pytest.mark.parametrize("legacy", [False, True])
@pytest.mark.parametrize("remaining", [-1, 0, 1, 3])
def test_fake_consume_matches_sql_guard(remaining: int, legacy: bool) -> None:
    """The in-memory consume accepts exactly what the SQL guard accepts."""
    db = FakeSupabaseClient()
    owner = db.add_user("Chief")
    community_id = db.add_community(owner)
    db.add_invite(community_id, code="EDGE0000", max_uses=5, remaining_uses=remaining)

    rows = db._rpc_consume_invite_code("EDGE0000", p_legacy_guard=legacy)

    assert bool(rows) is _sql_guard(remaining, legacy)
    if rows:
        expected = -1 if remaining == -1 else remaining - 1
        assert rows[0]["remaining_uses"] == expected


def test_members_counter_never_goes_negative() -> None:
    """Both the SQL function and the fake clamp the counter at zero."""
    assert "greatest(members_count + p_delta, 0)" in _function_body("increment_members_count")

    db = FakeSupabaseClient()
    community_id = db.add_community(db.add_user("Chief"), members_count=0)
    assert db._rpc_increment_members_count(community_id, -1) == 0
