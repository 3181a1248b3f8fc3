import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from mcp_registry.core.ids import gen_id
from mcp_registry.models.server import McpServer, McpServerTag
from mcp_registry.models.submission import ServerSubmission
from mcp_registry.services import moderation

LISTING = {
    "slug": "notes-mcp",
    "name": "Notes MCP",
    "description": "Personal notes over MCP",
    "transport": "stdio",
    "auth": "none",
    "tags": ["Notes", "productivity"],
    "capabilities": {"tools": True, "resources": True},
}


async def _submit(client, user, listing=LISTING):
    r = await client.post("/api/submissions", json=listing, headers={"X-API-Key": user["api_key"]})
    assert r.status_code == 201
    return r.json()["id"]


@pytest.mark.asyncio
async def test_admin_routes_require_admin_role(client, seed_user):
    r = await client.get("/api/admin/submissions", headers={"X-API-Key": seed_user["api_key"]})
    assert r.status_code == 403
    assert r.json() == {"error": "Unauthorized: Admin access required"}


@pytest.mark.asyncio
async def test_approve_publishes_server(client, db_session, seed_user, admin_user):
    submission_id = await _submit(client, seed_user)
    admin = {"X-API-Key": admin_user["api_key"]}

    r = await client.get("/api/admin/submissions", headers=admin)
    assert [s["id"] for s in r.json()] == [submission_id]

    r = await client.post(f"/api/admin/submissions/{submission_id}/approve", json={"notes": "lgtm"}, headers=admin)
    assert r.status_code == 200
    result = r.json()
    assert result["success"] is True
    assert result["server_id"]

    server = (await db_session.execute(select(McpServer).where(McpServer.slug == "notes-mcp"))).scalar_one()
    assert server.id == result["server_id"]
    assert server.owner_id == seed_user["account_id"]
    assert server.verified is False
    assert server.tags == ["notes", "productivity"]
    assert server.capabilities == {"tools": True, "resources": True, "prompts": False}

    tags = (
        await db_session.execute(select(McpServerTag.tag).where(McpServerTag.server_id == server.id))
    ).scalars().all()
    assert sorted(tags) == ["notes", "productivity"]

    submission = await db_session.get(ServerSubmission, submission_id)
    assert submission.status == "approved"
    assert submission.reviewed_by == admin_user["account_id"]
    assert submission.server_id == server.id

    # now public
    r = await client.get("/api/servers/notes-mcp")
    assert r.status_code == 200
    assert r.json()["id"] == server.id

    # second review is refused
    r = await client.post(f"/api/admin/submissions/{submission_id}/approve", headers=admin)
    assert r.json() == {"success": False, "error_message": "Submission has already been reviewed", "server_id": None}


@pytest.mark.asyncio
async def test_approve_refuses_taken_slug(client, make_server, seed_user, admin_user):
    await make_server("notes-mcp")
    submission_id = await _submit(client, seed_user)

    r = await client.post(
        f"/api/admin/submissions/{submission_id}/approve",
        headers={"X-API-Key": admin_user["api_key"]},
    )
    assert r.status_code == 200
    assert r.json()["success"] is False
    assert r.json()["error_message"] == "Slug is already taken"


@pytest.mark.asyncio
async def test_approve_revalidates_stored_payload(client, db_session, seed_user, admin_user):
    submission = ServerSubmission(
        submitted_by=seed_user["account_id"],
        submitted_payload=dict(LISTING, slug="Not Valid"),
        schema_version="v1",
        status="pending",
    )
    db_session.add(submission)
    await db_session.commit()

    r = await client.post(
        f"/api/admin/submissions/{submission.id}/approve",
        headers={"X-API-Key": admin_user["api_key"]},
    )
    result = r.json()
    assert result["success"] is False
    assert result["error_message"] == (
        "Submission is invalid: slug: Slug must be lowercase letters, numbers, and hyphens"
    )

    await db_session.refresh(submission)
    assert submission.status == "pending"
    assert submission.validation_errors == ["slug: Slug must be lowercase letters, numbers, and hyphens"]


@pytest.mark.asyncio
async def test_reject_requires_notes(client, db_session, seed_user, admin_user):
    submission_id = await _submit(client, seed_user)
    admin = {"X-API-Key": admin_user["api_key"]}

    r = await client.post(f"/api/admin/submissions/{submission_id}/reject", json={"notes": "  "}, headers=admin)
    assert r.status_code == 400
    assert r.json() == {"error": "Notes are required when rejecting a submission"}

    r = await client.post(
        f"/api/admin/submissions/{submission_id}/reject", json={"notes": "duplicate listing"}, headers=admin
    )
    assert r.status_code == 200
    assert r.json()["success"] is True

    submission = await db_session.get(ServerSubmission, submission_id)
    assert submission.status == "rejected"
    assert submission.review_notes == "duplicate listing"

    r = await client.get("/api/admin/submissions", params={"status": "rejected"}, headers=admin)
    assert [s["id"] for s in r.json()] == [submission_id]
    r = await client.get("/api/admin/submissions", headers=admin)
    assert r.json() == []


@pytest.mark.asyncio
async def test_bad_and_unknown_submission_ids(client, admin_user):
    admin = {"X-API-Key": admin_user["api_key"]}

    r = await client.post("/api/admin/submissions/not-a-uuid/approve", headers=admin)
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid submission ID"}

    r = await client.post(f"/api/admin/submissions/{gen_id()}/approve", headers=admin)
    assert r.status_code == 200
    assert r.json()["error_message"] == "Submission not found"


@pytest.mark.asyncio
async def test_slug_race_at_commit_reports_taken_slug(client, make_server, seed_user, admin_user, monkeypatch):
    submission_id = await _submit(client, seed_user)
    await make_server("notes-mcp")

    # the pre-check misses the row a concurrent approval just wrote
    real_slug_taken = moderation._slug_taken
    calls = []

    async def stale_then_real(db, slug):
        calls.append(slug)
        if len(calls) == 1:
            return False
        return await real_slug_taken(db, slug)

    monkeypatch.setattr(moderation, "_slug_taken", stale_then_real)

    r = await client.post(
        f"/api/admin/submissions/{submission_id}/approve",
        headers={"X-API-Key": admin_user["api_key"]},
    )
    assert r.status_code == 200
    assert r.json()["error_message"] == "Slug is already taken"
    assert calls == ["notes-mcp", "notes-mcp"]


@pytest.mark.asyncio
async def test_other_constraint_failure_is_a_store_error(client, db_session, seed_user, admin_user, monkeypatch):
    submission_id = await _submit(client, seed_user)

    async def broken_audit(db, **kwargs):
        raise IntegrityError("INSERT INTO audit_log ...", {}, Exception("foreign key violation"))

    monkeypatch.setattr(moderation, "audit", broken_audit)

    r = await client.post(
        f"/api/admin/submissions/{submission_id}/approve",
        headers={"X-API-Key": admin_user["api_key"]},
    )
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to approve submission. Please try again."}

    submission = await db_session.get(ServerSubmission, submission_id)
    await db_session.refresh(submission)
    assert submission.status == "pending"
    assert (await db_session.execute(select(McpServer.id))).first() is None
