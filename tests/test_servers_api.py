import logging

import pytest
from sqlalchemy.exc import OperationalError

from mcp_registry.core.db import get_db
from mcp_registry.main import app
from mcp_registry.services.servers import PUBLIC_SERVER_FIELDS

PUBLIC_CACHE = "public, max-age=0, s-maxage=300, stale-while-revalidate=60"


class FailingSession:
    """Session double whose every query fails with the given exception."""

    def __init__(self, exc: Exception):
        self.exc = exc
        self.calls = 0

    async def execute(self, *args, **kwargs):
        self.calls += 1
        raise self.exc


def _use_session(session):
    async def _override_get_db():
        yield session

    app.dependency_overrides[get_db] = _override_get_db


@pytest.mark.asyncio
async def test_get_server_returns_public_projection(client, make_server, seed_user):
    await make_server(
        "github-mcp",
        tags=["github", "vcs"],
        owner_id=seed_user["account_id"],
        moderation_notes="looked fine",
    )

    r = await client.get("/api/servers/github-mcp")
    assert r.status_code == 200
    assert r.headers["cache-control"] == PUBLIC_CACHE

    body = r.json()
    assert set(body) == set(PUBLIC_SERVER_FIELDS)
    assert body["slug"] == "github-mcp"
    assert body["tags"] == ["github", "vcs"]
    assert body["capabilities"] == {"tools": True, "resources": False, "prompts": False}
    assert "owner_id" not in body
    assert "moderation_notes" not in body


@pytest.mark.asyncio
async def test_get_unknown_server_is_404(client):
    r = await client.get("/api/servers/nope")
    assert r.status_code == 404
    assert r.json() == {"error": "Server not found"}
    assert "cache-control" not in r.headers


@pytest.mark.asyncio
@pytest.mark.parametrize("slug", ["Invalid Slug!", "Bad_Slug", "UPPER", "trail-", "a--b"])
async def test_malformed_slug_is_rejected_before_the_store(client, slug):
    session = FailingSession(RuntimeError("store must not be called"))
    _use_session(session)

    r = await client.get(f"/api/servers/{slug}")
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid slug format"}
    assert "cache-control" not in r.headers
    assert session.calls == 0


@pytest.mark.asyncio
async def test_store_failure_is_logged_not_leaked(client, caplog):
    secret = "password=hunter2 host=db.internal"
    _use_session(FailingSession(OperationalError("SELECT ...", {}, Exception(secret))))

    with caplog.at_level(logging.ERROR):
        r = await client.get("/api/servers/github-mcp")

    assert r.status_code == 500
    assert r.json() == {"error": "Failed to fetch server"}
    assert secret not in r.text
    assert "cache-control" not in r.headers
    assert secret in caplog.text


@pytest.mark.asyncio
async def test_unexpected_failure_is_generic_500(client, caplog):
    _use_session(FailingSession(RuntimeError("boom")))

    with caplog.at_level(logging.ERROR):
        r = await client.get("/api/servers/github-mcp")

    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error"}
    assert "boom" not in r.text
    assert "boom" in caplog.text


@pytest.mark.asyncio
async def test_list_servers_first_page_has_total(client, make_server):
    await make_server("alpha", minute=1)
    await make_server("beta", minute=2, verified=True)
    await make_server("gamma", minute=3)

    r = await client.get("/api/servers")
    assert r.status_code == 200
    assert r.headers["cache-control"] == PUBLIC_CACHE

    body = r.json()
    assert body["total"] == 3
    assert body["nextCursor"] is None
    # verified first, then newest
    assert [s["slug"] for s in body["data"]] == ["beta", "gamma", "alpha"]
    assert set(body["data"][0]) == set(PUBLIC_SERVER_FIELDS)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "sort,expected",
    [
        ("newest", ["epsilon", "delta", "gamma", "beta", "alpha"]),
        ("name", ["alpha", "beta", "delta", "epsilon", "gamma"]),
        ("verified", ["delta", "beta", "epsilon", "gamma", "alpha"]),
    ],
)
async def test_keyset_pages_walk_every_row_once(client, make_server, sort, expected):
    for minute, slug in enumerate(["alpha", "beta", "gamma", "delta", "epsilon"]):
        await make_server(slug, minute=minute, verified=slug in ("beta", "delta"))

    seen = []
    params = {"sort": sort, "limit": "2"}
    first = True
    while True:
        r = await client.get("/api/servers", params=params)
        assert r.status_code == 200
        body = r.json()
        if first:
            assert body["total"] == 5
            first = False
        else:
            assert "total" not in body
        seen.extend(s["slug"] for s in body["data"])
        if not body["nextCursor"]:
            break
        params = {"sort": sort, "limit": "2", "cursor": body["nextCursor"]}

    assert seen == expected


@pytest.mark.asyncio
async def test_default_sort_pages_cross_verified_boundary(client, make_server):
    await make_server("alpha", minute=1)
    await make_server("beta", minute=2, verified=True)
    await make_server("gamma", minute=3)

    seen = []
    params = {"limit": "1"}
    for _ in range(5):
        r = await client.get("/api/servers", params=params)
        assert r.status_code == 200
        body = r.json()
        assert len(body["data"]) == 1
        seen.append(body["data"][0]["slug"])
        if not body["nextCursor"]:
            break
        params = {"limit": "1", "cursor": body["nextCursor"]}

    assert seen == ["beta", "gamma", "alpha"]


@pytest.mark.asyncio
async def test_list_filters(client, make_server):
    await make_server("github-mcp", minute=1, tags=["github", "vcs"], transport="http", auth="oauth")
    await make_server("gitlab-mcp", minute=2, tags=["vcs"], transport="stdio", auth="api_key")
    await make_server("weather", minute=3, tags=["api"], description="Forecasts 100% of the time")

    async def slugs(**params):
        r = await client.get("/api/servers", params=params)
        assert r.status_code == 200
        return [s["slug"] for s in r.json()["data"]]

    assert await slugs(tag="vcs") == ["gitlab-mcp", "github-mcp"]
    assert await slugs(tag=["VCS", "github"]) == ["github-mcp"]
    assert await slugs(transport="http") == ["github-mcp"]
    assert await slugs(auth="api_key") == ["gitlab-mcp"]
    assert await slugs(q="GITLAB") == ["gitlab-mcp"]
    assert await slugs(q="100%") == ["weather"]
    assert await slugs(q="_") == []
    # unknown enum values are ignored, not errors
    assert len(await slugs(transport="carrier-pigeon")) == 3


@pytest.mark.asyncio
async def test_list_verified_filter(client, make_server):
    await make_server("one", minute=1, verified=True)
    await make_server("two", minute=2)

    r = await client.get("/api/servers", params={"verified": "true"})
    assert [s["slug"] for s in r.json()["data"]] == ["one"]
    r = await client.get("/api/servers", params={"verified": "false"})
    assert [s["slug"] for s in r.json()["data"]] == ["two"]


@pytest.mark.asyncio
async def test_list_garbage_cursor_restarts_from_first_page(client, make_server):
    await make_server("alpha", minute=1)

    r = await client.get("/api/servers", params={"cursor": "garbage"})
    assert r.status_code == 200
    assert r.json()["total"] == 1


@pytest.mark.asyncio
async def test_list_store_failure(client, caplog):
    _use_session(FailingSession(OperationalError("SELECT ...", {}, Exception("conn refused"))))

    with caplog.at_level(logging.ERROR):
        r = await client.get("/api/servers")

    assert r.status_code == 500
    assert r.json() == {"error": "Failed to fetch servers"}
    assert "cache-control" not in r.headers
