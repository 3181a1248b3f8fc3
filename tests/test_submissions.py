import pytest
from sqlalchemy import select

from mcp_registry.models.audit_log import AuditLog
from mcp_registry.models.submission import ServerSubmission
from mcp_registry.services.auth import Actor
from mcp_registry.services.listing_validate import validate_listing
from mcp_registry.services.submissions import create_submission

LISTING = {
    "slug": "weather-mcp",
    "name": "Weather MCP",
    "description": "Forecasts for agents",
    "transport": "http",
    "auth": "api_key",
    "homepage_url": "",
    "repo_url": "https://github.com/example/weather-mcp",
    "tags": ["Weather", "weather", " API "],
}


@pytest.mark.asyncio
async def test_submission_requires_api_key(client):
    r = await client.post("/api/submissions", json=LISTING)
    assert r.status_code == 401
    assert r.json() == {"error": "Missing X-API-Key"}

    r = await client.post("/api/submissions", json=LISTING, headers={"X-API-Key": "mcp_nope_nope"})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid API key"}


@pytest.mark.asyncio
async def test_submit_stores_normalized_pending_payload(client, db_session, seed_user):
    headers = {"X-API-Key": seed_user["api_key"]}

    r = await client.post("/api/submissions", json=LISTING, headers=headers)
    assert r.status_code == 201
    created = r.json()
    assert created["status"] == "pending"
    assert created["schema_version"] == "v1"

    row = (
        await db_session.execute(select(ServerSubmission).where(ServerSubmission.id == created["id"]))
    ).scalar_one()
    assert row.submitted_by == seed_user["account_id"]
    assert row.submitted_payload["tags"] == ["weather", "api"]
    assert "homepage_url" not in row.submitted_payload
    assert row.submitted_payload["capabilities"] == {"tools": False, "resources": False, "prompts": False}

    actions = (await db_session.execute(select(AuditLog.action))).scalars().all()
    assert "submission_created" in actions

    r = await client.get("/api/my/submissions", headers=headers)
    assert r.status_code == 200
    mine = r.json()
    assert [s["id"] for s in mine] == [created["id"]]
    assert mine[0]["submitted_payload"]["slug"] == "weather-mcp"


@pytest.mark.asyncio
async def test_invalid_submission_lists_every_problem(client, seed_user):
    bad = dict(LISTING, slug="Weather MCP", description="", docs_url="not a url")

    r = await client.post("/api/submissions", json=bad, headers={"X-API-Key": seed_user["api_key"]})
    assert r.status_code == 422
    assert r.json() == {
        "error": "Validation failed",
        "details": [
            "slug: Slug must be lowercase letters, numbers, and hyphens",
            "description: Description is required",
            "docs_url: Must be a valid URL",
        ],
    }


@pytest.mark.asyncio
async def test_non_json_body_is_invalid_request(client, seed_user):
    r = await client.post(
        "/api/submissions",
        content=b"{not json",
        headers={"X-API-Key": seed_user["api_key"], "Content-Type": "application/json"},
    )
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid request"}


@pytest.mark.asyncio
async def test_create_submission_refuses_failed_validation(db_session, seed_user):
    actor = Actor(
        api_key_id="k",
        account_id=seed_user["account_id"],
        email=seed_user["email"],
        display_name=None,
        role="user",
    )
    failed = validate_listing(dict(LISTING, slug=""))

    with pytest.raises(ValueError):
        await create_submission(db_session, actor=actor, result=failed)
