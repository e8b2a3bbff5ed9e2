"""HTTP tests for community, membership and invite endpoints."""

from __future__ import annotations

from datetime import timedelta

from postgrest import APIError

from cad_api.utils.time import now_utc


def test_join_community_response_shape(api, db, community_id: str) -> None:
    """A successful join returns the camelCase summary payload."""
    db.add_invite(community_id, code="JOIN0000", max_uses=3)
    api.user_id = db.add_user("Deputy")

    response = api.http.post("/communities/join", json={"inviteCode": "JOIN0000"})

    assert response.status_code == 200
    assert response.json() == {
        "status": "joined",
        "communityId": community_id,
        "community": {
            "id": community_id,
            "name": "Los Santos RP",
            "imageLink": "https://cdn.example.com/ls.png",
        },
    }


def test_join_error_statuses(api, db, owner_id: str, community_id: str) -> None:
    """Invalid, expired and banned joins map to 400, 400 and 403."""
    user_id = db.add_user("Troublemaker")
    api.user_id = user_id

    missing = api.http.post("/communities/join", json={"inviteCode": "NOPE0000"})
    assert missing.status_code == 400
    assert missing.json()["code"] == "INVALID_INVITE"

    db.add_invite(community_id, code="OLD00000", expires_at=now_utc() - timedelta(days=1))
    expired = api.http.post("/communities/join", json={"inviteCode": "OLD00000"})
    assert expired.status_code == 400
    assert expired.json()["code"] == "INVITE_EXPIRED"

    banned_cid = db.add_community(owner_id, name="Paleto", ban_list=[user_id])
    db.add_invite(banned_cid, code="BAN00000")
    banned = api.http.post("/communities/join", json={"inviteCode": "BAN00000"})
    assert banned.status_code == 403
    assert banned.json()["code"] == "FORBIDDEN"


def test_join_validation_and_store_failure(api, db, community_id: str) -> None:
    """Malformed bodies are 400 and store outages are 500."""
    api.user_id = db.add_user("Deputy")

    invalid = api.http.post("/communities/join", json={})
    assert invalid.status_code == 400
    assert invalid.json()["code"] == "INVALID_INPUT"
    assert invalid.json()["error"].startswith("inviteCode: ")

    db.fail(
        "consume_invite_code",
        APIError({"message": "timeout", "code": "57014", "hint": None, "details": None}),
    )
    failed = api.http.post("/communities/join", json={"inviteCode": "JOIN0000"})
    assert failed.status_code == 500
    assert failed.json()["code"] == "STORE_UNAVAILABLE"


def test_malformed_community_id_is_rejected(api, db) -> None:
    """Path ids must be uuids."""
    api.user_id = db.add_user("Deputy")

    response = api.http.get("/communities/not-a-uuid")

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_INPUT"


def test_create_and_get_community(api, db) -> None:
    """Creating a community makes the caller its owner and first member."""
    api.user_id = db.add_user("Chief")

    created = api.http.post(
        "/communities", json={"name": "Blaine County", "imageLink": "https://img/bc.png"}
    )
    assert created.status_code == 200
    body = created.json()
    assert body["ownerId"] == api.user_id
    assert body["membersCount"] == 1

    fetched = api.http.get(f"/communities/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "Blaine County"

    mine = api.http.get("/users/me/communities")
    assert [row["communityId"] for row in mine.json()] == [body["id"]]


def test_request_approve_and_ban_flow(api, db, owner_id: str, community_id: str) -> None:
    """Owner moderation endpoints drive the membership lifecycle."""
    recruit = db.add_user("Recruit")

    api.user_id = recruit
    requested = api.http.post(f"/communities/{community_id}/requests")
    assert requested.status_code == 200
    assert requested.json()["status"] == "pending"

    forbidden = api.http.post(f"/communities/{community_id}/members/{recruit}/approve")
    assert forbidden.status_code == 403

    api.user_id = owner_id
    approved = api.http.post(f"/communities/{community_id}/members/{recruit}/approve")
    assert approved.status_code == 200
    assert approved.json()["status"] == "approved"

    again = api.http.post(f"/communities/{community_id}/members/{recruit}/approve")
    assert again.status_code == 409

    members = api.http.get(f"/communities/{community_id}/members", params={"status": "approved"})
    assert {row["userId"] for row in members.json()} == {owner_id, recruit}

    banned = api.http.post(f"/communities/{community_id}/members/{recruit}/ban")
    assert banned.status_code == 200
    ban_list = api.http.get(f"/communities/{community_id}/banned")
    assert ban_list.json() == {"communityId": community_id, "bannedUserIds": [recruit]}

    unbanned = api.http.delete(f"/communities/{community_id}/members/{recruit}/ban")
    assert unbanned.status_code == 200
    assert db.memberships(recruit) == []


def test_leave_community(api, db, community_id: str) -> None:
    """Members can leave; leaving twice is a client error."""
    user_id = db.add_user("Deputy")
    db.add_membership(user_id, community_id, "approved")
    api.user_id = user_id

    first = api.http.delete(f"/communities/{community_id}/membership")
    assert first.status_code == 200

    second = api.http.delete(f"/communities/{community_id}/membership")
    assert second.status_code == 400


def test_invite_code_endpoints(api, db, owner_id: str, community_id: str) -> None:
    """Owners create, list, look up and revoke invite codes."""
    api.user_id = owner_id

    created = api.http.post(f"/communities/{community_id}/invite-codes", json={"maxUses": 2})
    assert created.status_code == 200
    invite = created.json()
    assert invite["remainingUses"] == 2
    assert invite["communityId"] == community_id

    listed = api.http.get(f"/communities/{community_id}/invite-codes")
    assert [row["id"] for row in listed.json()] == [invite["id"]]

    found = api.http.get("/invite-codes", params={"code": invite["code"]})
    assert found.status_code == 200
    assert found.json()["maxUses"] == 2

    negative = api.http.post(f"/communities/{community_id}/invite-codes", json={"maxUses": -1})
    assert negative.status_code == 400

    revoked = api.http.delete(f"/invite-codes/{invite['id']}")
    assert revoked.status_code == 200
    missing = api.http.get("/invite-codes", params={"code": invite["code"]})
    assert missing.status_code == 404


def test_invite_lookup_requires_code(api, db) -> None:
    """A lookup without a code is rejected."""
    api.user_id = db.add_user("Deputy")

    response = api.http.get("/invite-codes")

    assert response.status_code == 400
