import pytest


def _client(settings):
    try:
        from fastapi.testclient import TestClient
    except Exception:
        pytest.skip("fastapi not installed")

    from listing_aggregator.api.app import app
    from listing_aggregator.api.routes.search import get_search_service
    from listing_aggregator.pipeline import SearchService

    app.dependency_overrides[get_search_service] = lambda: SearchService(settings=settings)
    return app, TestClient(app)


@pytest.fixture
def client(settings):
    app, test_client = _client(settings)
    yield test_client
    app.dependency_overrides.clear()


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_post_search_returns_ranked_page(client):
    resp = client.post(
        "/api/search",
        json={"location_query": "Miami, FL", "listing_category": "lease"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_count"] == 3
    assert body["page"] == 1
    assert body["page_size"] == 20
    ids = {item["id"] for item in body["page_items"]}
    assert ids == {"p-101", "agg-lease-7001", "9101"}
    assert all(item["listing_category"] == "lease" for item in body["page_items"])
    assert "raw_payload" not in body["page_items"][0]


def test_post_search_price_range(client):
    resp = client.post(
        "/api/search",
        json={"price_range": {"min": 500000, "max": 1000000}},
    )
    assert resp.status_code == 200
    assert [item["id"] for item in resp.json()["page_items"]] == ["p-102"]


def test_invalid_filters_are_ignored_not_rejected(client):
    resp = client.post(
        "/api/search",
        json={"listing_category": "timeshare", "price_range": {"min": "lots", "max": 10}},
    )
    assert resp.status_code == 200
    assert resp.json()["total_count"] == 6


def test_get_search_with_query_params(client):
    resp = client.get("/api/search", params={"location": "houston", "min_sqft": "5000"})
    assert resp.status_code == 200
    body = resp.json()
    assert [item["id"] for item in body["page_items"]] == ["p-300"]
    statuses = {s["source"]: s["status"] for s in body["sources"]}
    assert statuses["commercial_houston"] == "failed"
    assert statuses["commercial_combined"] == "success"


def test_resolve_sources_endpoint(client):
    resp = client.get("/api/sources/resolve", params={"location": "Miami Beach, FL"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["normalized"] == "miami beach"
    assert body["city"] == "miami beach"
    assert "commercial_miami_beach" in [s["id"] for s in body["sources"]]

    sale_only = client.get(
        "/api/sources/resolve", params={"location": "miami", "listing_type": "sale"}
    ).json()
    assert all("sale" in s["listing_tags"] for s in sale_only["sources"])
