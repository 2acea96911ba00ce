"""Round Routes — tests for the trending feed and founder CRUD over HTTP.

Tests cover:
    - POST /rounds → 201 with zeroed counters; invalid body → 400
    - GET /rounds/trending ordering, limit default and bounds
    - A store outage on the trending read maps to 503
    - PATCH/DELETE restricted to the founder; counters not writable
"""

from uuid import uuid4

from fundfeed.api.dependencies import get_ranking_engine
from fundfeed.main import app
from fundfeed.services.ranking_engine import RankingEngine
from tests.services.fake_store import FakeRoundRepository

FOUNDER = {"X-User-Id": "founder-1"}
OTHER = {"X-User-Id": "founder-2"}

ROUND = {
    "companyName": "Acme", "description": "Robots", "raisingAmount": 1000000,
    "logoUrl": "logos/a.png", "deckUrl": "decks/a.pdf",
}


async def test_create_round(client):
    res = await client.post("/api/v1/rounds", headers=FOUNDER, json=ROUND)

    assert res.status_code == 201
    body = res.json()
    assert body["founderId"] == "founder-1"
    assert body["currency"] == "USD"
    assert body["followerCount"] == 0
    assert body["introRequestCount"] == 0


async def test_create_round_requires_identity(client):
    res = await client.post("/api/v1/rounds", json=ROUND)
    assert res.status_code == 401


async def test_create_round_rejects_non_positive_amount(client):
    res = await client.post(
        "/api/v1/rounds", headers=FOUNDER, json={**ROUND, "raisingAmount": 0},
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_create_round_rejects_blank_name(client):
    res = await client.post(
        "/api/v1/rounds", headers=FOUNDER, json={**ROUND, "companyName": "   "},
    )
    assert res.status_code == 400


async def test_trending_newest_first(client):
    for name in ("First", "Second", "Third"):
        await client.post(
            "/api/v1/rounds", headers=FOUNDER, json={**ROUND, "companyName": name},
        )

    res = await client.get("/api/v1/rounds/trending", params={"limit": 2})

    assert res.status_code == 200
    body = res.json()
    assert body["limit"] == 2
    assert [r["companyName"] for r in body["rounds"]] == ["Third", "Second"]


async def test_trending_default_limit(client):
    res = await client.get("/api/v1/rounds/trending")
    assert res.status_code == 200
    assert res.json()["limit"] == 20


async def test_trending_rejects_bad_limits(client):
    assert (await client.get("/api/v1/rounds/trending", params={"limit": 0})).status_code == 400
    assert (await client.get("/api/v1/rounds/trending", params={"limit": 101})).status_code == 400


async def test_trending_store_outage_is_503(client):
    failing = FakeRoundRepository()
    failing.fail_lists = True
    app.dependency_overrides[get_ranking_engine] = lambda: RankingEngine(failing)

    res = await client.get("/api/v1/rounds/trending")

    assert res.status_code == 503
    assert res.json()["error"]["code"] == "STORE_UNAVAILABLE"
    assert failing.list_calls == 1


async def test_get_round_not_found(client):
    res = await client.get(f"/api/v1/rounds/{uuid4()}")
    assert res.status_code == 404


async def test_patch_by_founder(client):
    created = (await client.post("/api/v1/rounds", headers=FOUNDER, json=ROUND)).json()

    res = await client.patch(
        f"/api/v1/rounds/{created['id']}", headers=FOUNDER,
        json={"description": "Faster robots", "currency": "gbp"},
    )

    assert res.status_code == 200
    assert res.json()["description"] == "Faster robots"
    assert res.json()["currency"] == "GBP"


async def test_patch_by_other_founder_is_403(client):
    created = (await client.post("/api/v1/rounds", headers=FOUNDER, json=ROUND)).json()
    res = await client.patch(
        f"/api/v1/rounds/{created['id']}", headers=OTHER, json={"description": "x"},
    )
    assert res.status_code == 403


async def test_patch_cannot_set_counters(client):
    created = (await client.post("/api/v1/rounds", headers=FOUNDER, json=ROUND)).json()
    res = await client.patch(
        f"/api/v1/rounds/{created['id']}", headers=FOUNDER, json={"followerCount": 99},
    )
    assert res.status_code == 400


async def test_delete_round(client):
    created = (await client.post("/api/v1/rounds", headers=FOUNDER, json=ROUND)).json()

    assert (await client.delete(f"/api/v1/rounds/{created['id']}", headers=OTHER)).status_code == 403
    assert (await client.delete(f"/api/v1/rounds/{created['id']}", headers=FOUNDER)).status_code == 204
    assert (await client.get(f"/api/v1/rounds/{created['id']}")).status_code == 404


async def test_list_my_rounds(client):
    await client.post("/api/v1/rounds", headers=FOUNDER, json=ROUND)
    await client.post("/api/v1/rounds", headers=OTHER, json=ROUND)

    res = await client.get("/api/v1/rounds/mine", headers=FOUNDER)

    assert [r["founderId"] for r in res.json()["rounds"]] == ["founder-1"]
