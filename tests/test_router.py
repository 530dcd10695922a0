"""HTTP tests for the catalogue endpoints."""

import random

from bookstock.catalog.errors import ParseError, UpstreamFetchError
from bookstock.catalog.router import get_rng

from .conftest import CountingLoader


def test_health_check(api):
    assert api.get("/").json() == {"status": "ok"}


def test_list_catalog_shape_and_headers(api):
    response = api.get("/catalog", params={"limit": 2})

    assert response.status_code == 200
    body = response.json()
    assert [b["id"] for b in body["items"]] == ["1", "2"]
    assert set(body["items"][0]) == {"id", "isbn", "title", "author", "publisher", "price", "stock"}
    assert body["pagination"] == {
        "page": 1,
        "limit": 2,
        "total": 5,
        "totalPages": 3,
        "hasNext": True,
        "hasPrev": False,
    }
    assert body["lastUpdated"].startswith("2026-10-18T09:00:00")
    assert response.headers["cache-control"] == "public, s-maxage=3600, stale-while-revalidate=1800"
    assert response.headers["cdn-cache-control"] == "public, s-maxage=3600"


def test_list_catalog_defaults(api):
    body = api.get("/catalog").json()
    assert body["pagination"]["page"] == 1
    assert body["pagination"]["limit"] == 20
    assert len(body["items"]) == 5


def test_list_catalog_filters(api):
    body = api.get(
        "/catalog",
        params={"search": " 한강 ", "stockFilter": "inStock", "publisher": "창비"},
    ).json()
    assert [b["id"] for b in body["items"]] == ["1"]
    assert body["pagination"]["total"] == 1


def test_page_past_the_end(api):
    response = api.get("/catalog", params={"page": 9, "limit": 2})
    assert response.status_code == 200
    body = response.json()
    assert body["items"] == []
    assert body["pagination"]["totalPages"] == 3
    assert body["pagination"]["hasNext"] is False
    assert body["pagination"]["hasPrev"] is True


def test_invalid_pagination_is_rejected_before_fetching(api):
    for params in ({"page": 0}, {"limit": 0}, {"limit": 1001}, {"page": "two"}):
        response = api.get("/catalog", params=params)
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid pagination parameters"
    assert api.loader.calls == 0


def test_unknown_stock_filter_is_rejected(api):
    response = api.get("/catalog", params={"stockFilter": "maybe"})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid stockFilter parameter"


def test_empty_filters_mean_all(api):
    response = api.get("/catalog", params={"stockFilter": "", "publisher": ""})
    assert response.status_code == 200
    body = response.json()
    assert len(body["items"]) == 5
    assert body["pagination"]["total"] == 5


def test_upstream_failure_is_500_with_details(api):
    api.loader.results = [UpstreamFetchError(details="503 Service Unavailable")]

    response = api.get("/catalog")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch sheet", "details": "503 Service Unavailable"}


def test_parse_failure_is_500_with_its_own_message(api):
    api.loader.results = [ParseError(details="missing required column(s): isbn")]

    response = api.get("/catalog/random")

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to parse inventory sheet"


def test_random_defaults_exclude_out_of_stock(api):
    response = api.get("/catalog/random")

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 3
    assert len(body["recommendations"]) == 3
    assert {b["id"] for b in body["recommendations"]} == {"1", "4", "5"}
    assert response.headers["cache-control"] == "public, s-maxage=1800, stale-while-revalidate=900"


def test_random_count_and_include_out_of_stock(api):
    body = api.get("/catalog/random", params={"count": 2, "includeOutOfStock": "true"}).json()
    assert body["total"] == 5
    assert len(body["recommendations"]) == 2


def test_random_count_is_clamped(api):
    assert len(api.get("/catalog/random", params={"count": 0}).json()["recommendations"]) == 1
    body = api.get("/catalog/random", params={"count": "lots", "includeOutOfStock": "true"}).json()
    assert len(body["recommendations"]) == 5


def test_random_uses_injected_rng(api):
    from bookstock.main import app

    app.dependency_overrides[get_rng] = lambda: random.Random(5)
    first = api.get("/catalog/random", params={"count": 2}).json()["recommendations"]
    second = api.get("/catalog/random", params={"count": 2}).json()["recommendations"]
    assert first == second


def test_random_with_no_eligible_records(api, inventory):
    from .conftest import make_record, make_snapshot

    api.loader.results = [make_snapshot([make_record(1, stock="0")])]
    body = api.get("/catalog/random").json()
    assert body["recommendations"] == []
    assert body["total"] == 0


def test_publishers(api):
    body = api.get("/catalog/publishers").json()
    assert body["publishers"] == ["Grand Central", "Hogarth", "Knopf", "창비"]
    assert "lastUpdated" in body


def test_revalidate_forces_a_new_fetch(api):
    api.get("/catalog")
    api.get("/catalog")
    assert api.loader.calls == 1

    response = api.post("/catalog/revalidate", params={"tag": "books-data"})
    assert response.json() == {"revalidated": True, "tag": "books-data"}

    api.get("/catalog")
    assert api.loader.calls == 2


def test_revalidate_unknown_tag(api):
    response = api.post("/catalog/revalidate", params={"tag": "other"})
    assert response.json() == {"revalidated": False, "tag": "other"}


def test_each_surface_has_its_own_cache_entry(api):
    api.get("/catalog")
    api.get("/catalog/random")
    assert isinstance(api.loader, CountingLoader)
    assert api.loader.calls == 2
