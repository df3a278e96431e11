import pytest
from httpx import ASGITransport, AsyncClient

from core.database import get_db
from main import app
from services.duel_engine import get_duel_engine


@pytest.fixture
async def client(session_factory, duel_engine):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_duel_engine] = lambda: duel_engine
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    async def _register(username: str):
        response = await client.post("/users/register", json={"username": username})
        assert response.status_code == 201
        body = response.json()
        return body["user"], {"Authorization": f"Bearer {body['access_token']}"}

    return _register


async def test_register_returns_token_and_default_rating(client, register):
    user, headers = await register("alice")

    assert user["rating"] == 1000
    assert (user["wins"], user["losses"]) == (0, 0)

    me = await client.get("/users/me", headers=headers)
    assert me.json()["username"] == "alice"

    duplicate = await client.post("/users/register", json={"username": "alice"})
    assert duplicate.status_code == 409


async def test_requests_need_token(client):
    assert (await client.get("/duels")).status_code == 401
    bad = await client.get("/duels", headers={"Authorization": "Bearer nope"})
    assert bad.status_code == 401


async def test_scalar_duel_over_http(client, register):
    alice, alice_headers = await register("alice")
    bob, bob_headers = await register("bob")

    post = await client.post("/posts", json={"content": "tabs over spaces"}, headers=bob_headers)
    assert post.status_code == 201
    post_id = post.json()["id"]

    created = await client.post(
        "/duels",
        json={"content_id": post_id, "defender_id": bob["id"], "mode": "scalar"},
        headers=alice_headers,
    )
    assert created.status_code == 201
    request_id = created.json()["id"]

    again = await client.post(
        "/duels",
        json={"content_id": post_id, "defender_id": bob["id"], "mode": "scalar"},
        headers=alice_headers,
    )
    assert again.status_code == 409
    assert again.headers["x-error-code"] == "DuplicateChallenge"

    early = await client.post(
        f"/duels/{request_id}/moves", json={"move": {"kind": "scalar", "value": 1}}, headers=alice_headers
    )
    assert early.status_code == 409

    accepted = await client.post(
        f"/duels/{request_id}/respond", json={"decision": "accepted"}, headers=bob_headers
    )
    assert accepted.json()["status"] == "accepted"

    bad_move = await client.post(
        f"/duels/{request_id}/moves", json={"move": {"kind": "scalar", "value": "750"}}, headers=alice_headers
    )
    assert bad_move.status_code == 422
    assert bad_move.headers["x-error-code"] == "InvalidMove"

    first = await client.post(
        f"/duels/{request_id}/moves", json={"move": {"kind": "scalar", "value": 750}}, headers=alice_headers
    )
    assert first.json()["completed"] is False
    assert first.json()["request"]["challenger_moved"] is True

    second = await client.post(
        f"/duels/{request_id}/moves", json={"move": {"kind": "scalar", "value": 500}}, headers=bob_headers
    )
    result = second.json()
    assert result["completed"] is True
    assert result["history"]["winner_id"] == alice["id"]
    assert result["history"]["outcome"]["winner_side"] == "challenger"

    profile = await client.get(f"/users/{alice['id']}", headers=bob_headers)
    assert profile.json()["rating"] == 1016

    history = await client.get("/duels/history", headers=bob_headers)
    [entry] = history.json()

    actions = await client.get(f"/duels/history/{entry['id']}/actions", headers=alice_headers)
    assert actions.json() == {"can_destroy": True, "can_post_on_behalf": False, "can_forward": True}

    destroyed = await client.post(f"/duels/history/{entry['id']}/destroy", headers=alice_headers)
    assert destroyed.json()["post_destroyed"] is True
    twice = await client.post(f"/duels/history/{entry['id']}/destroy", headers=alice_headers)
    assert twice.status_code == 409

    feed = await client.get("/posts", headers=alice_headers)
    assert feed.json() == []


async def test_post_on_behalf_over_http(client, register):
    alice, alice_headers = await register("alice")
    bob, bob_headers = await register("bob")
    post_id = (await client.post("/posts", json={"content": "hot take"}, headers=bob_headers)).json()["id"]

    request_id = (
        await client.post(
            "/duels",
            json={"content_id": post_id, "defender_id": bob["id"], "mode": "scalar"},
            headers=alice_headers,
        )
    ).json()["id"]
    await client.post(f"/duels/{request_id}/respond", json={"decision": "accepted"}, headers=bob_headers)
    await client.post(f"/duels/{request_id}/moves", json={"move": {"kind": "scalar", "value": 1}}, headers=alice_headers)
    await client.post(f"/duels/{request_id}/moves", json={"move": {"kind": "scalar", "value": 2}}, headers=bob_headers)

    [entry] = (await client.get("/duels/history", headers=alice_headers)).json()
    hijack = await client.post(
        f"/duels/history/{entry['id']}/post-on-behalf",
        json={"content": "bob was right"},
        headers=bob_headers,
    )
    assert hijack.status_code == 201
    assert hijack.json()["user_id"] == alice["id"]
    assert hijack.json()["username"] == "alice"

    forbidden = await client.post(
        f"/duels/history/{entry['id']}/destroy", headers=alice_headers
    )
    assert forbidden.status_code == 403


async def test_health_reports_live_duels(client):
    response = await client.get("/health")
    assert response.json() == {"status": "ok", "live_duels": 0}
