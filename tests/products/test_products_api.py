import pytest
from httpx import AsyncClient

from tests.constants import PHOTO


def _product(**overrides):
    data = {
        "name": "Desk Lamp",
        "description": "Warm light",
        "price": 40.0,
        "stock": 10,
        "category": "Home",
        "photos": [PHOTO],
    }
    data.update(overrides)
    return data


async def _create(client: AsyncClient, **overrides) -> dict:
    response = await client.post("/api/v1/product/new", json=_product(**overrides))
    assert response.status_code == 201
    return response.json()["data"]


@pytest.mark.asyncio
class TestProductsAPI:
    """Catalog endpoints, role checks and cache coherence after writes."""

    async def test_create_product_normalizes_category(self, admin_client: AsyncClient):
        product = await _create(admin_client, category="  Audio ")
        assert product["category"] == "audio"
        assert product["ratings"] == 0
        assert product["num_of_reviews"] == 0

    async def test_customer_cannot_create_product(self, customer_client: AsyncClient):
        response = await customer_client.post("/api/v1/product/new", json=_product())
        assert response.status_code == 403
        assert response.json()["success"] is False

    async def test_anonymous_cannot_modify_product(
        self, admin_client: AsyncClient, anonymous_client: AsyncClient
    ):
        product = await _create(admin_client)
        response = await anonymous_client.put(
            f"/api/v1/product/{product['id']}", json={"price": 1}
        )
        assert response.status_code == 401
        response = await anonymous_client.delete(f"/api/v1/product/{product['id']}")
        assert response.status_code == 401

    async def test_photo_count_is_validated(self, admin_client: AsyncClient):
        response = await admin_client.post(
            "/api/v1/product/new", json=_product(photos=[])
        )
        assert response.status_code == 422
        response = await admin_client.post(
            "/api/v1/product/new", json=_product(photos=[PHOTO] * 6)
        )
        assert response.status_code == 422

    async def test_get_missing_product(self, anonymous_client: AsyncClient, cache_backend):
        response = await anonymous_client.get("/api/v1/product/999")
        assert response.status_code == 404
        assert "product-999" not in cache_backend.keys()

    async def test_update_shows_in_listing_and_detail(
        self, admin_client: AsyncClient, anonymous_client: AsyncClient, cache_backend
    ):
        product = await _create(admin_client, price=500)

        listing = await anonymous_client.get("/api/v1/product/all", params={"search": "lamp"})
        assert listing.status_code == 200
        assert [p["price"] for p in listing.json()["data"]["products"]] == [500]
        detail = await anonymous_client.get(f"/api/v1/product/{product['id']}")
        assert detail.json()["data"]["price"] == 500
        assert "products-lamp-*-*-*-1" in cache_backend.keys()

        response = await admin_client.put(
            f"/api/v1/product/{product['id']}", json={"price": 450}
        )
        assert response.status_code == 200
        assert "products-lamp-*-*-*-1" not in cache_backend.keys()

        listing = await anonymous_client.get("/api/v1/product/all", params={"search": "lamp"})
        assert [p["price"] for p in listing.json()["data"]["products"]] == [450]
        detail = await anonymous_client.get(f"/api/v1/product/{product['id']}")
        assert detail.json()["data"]["price"] == 450

    async def test_update_of_one_product_keeps_another_cached(
        self, admin_client: AsyncClient, anonymous_client: AsyncClient, cache_backend
    ):
        first = await _create(admin_client, name="First")
        second = await _create(admin_client, name="Second")
        await anonymous_client.get(f"/api/v1/product/{first['id']}")
        await anonymous_client.get(f"/api/v1/product/{second['id']}")

        await admin_client.put(f"/api/v1/product/{first['id']}", json={"stock": 3})

        assert f"product-{first['id']}" not in cache_backend.keys()
        assert f"product-{second['id']}" in cache_backend.keys()

    async def test_empty_update_is_rejected(self, admin_client: AsyncClient):
        product = await _create(admin_client)
        response = await admin_client.put(f"/api/v1/product/{product['id']}", json={})
        assert response.status_code == 422

    async def test_listing_filters_sort_and_pages(
        self, admin_client: AsyncClient, anonymous_client: AsyncClient
    ):
        for index, price in enumerate([30, 10, 20, 70, 50, 60, 40]):
            await _create(admin_client, name=f"Lamp {index}", price=price)
        await _create(admin_client, name="Chair", price=5, category="furniture")

        response = await anonymous_client.get(
            "/api/v1/product/all",
            params={"search": "LAMP", "sort": "asc", "category": "home", "price": 60},
        )
        data = response.json()["data"]
        assert [p["price"] for p in data["products"]] == [10, 20, 30, 40, 50, 60]
        assert data["total_page"] == 1

        page_two = await anonymous_client.get("/api/v1/product/all", params={"page": 2})
        data = page_two.json()["data"]
        assert data["total_page"] == 2
        assert len(data["products"]) == 2

    async def test_search_is_literal(
        self, admin_client: AsyncClient, anonymous_client: AsyncClient
    ):
        await _create(admin_client, name="100% Cotton Tee")
        await _create(admin_client, name="Cotton Tee")

        response = await anonymous_client.get("/api/v1/product/all", params={"search": "0%"})
        assert [p["name"] for p in response.json()["data"]["products"]] == [
            "100% Cotton Tee"
        ]

    async def test_latest_categories_and_admin_list(
        self, admin_client: AsyncClient, customer_client: AsyncClient, cache_backend
    ):
        for index in range(6):
            await _create(admin_client, name=f"P{index}", category=f"cat{index % 2}")

        latest = await customer_client.get("/api/v1/product/latest")
        assert len(latest.json()["data"]) == 5
        categories = await customer_client.get("/api/v1/product/categories")
        assert categories.json()["data"] == ["cat0", "cat1"]

        assert (await customer_client.get("/api/v1/product/admin-products")).status_code == 403
        everything = await admin_client.get("/api/v1/product/admin-products")
        assert len(everything.json()["data"]) == 6
        assert cache_backend._cache["all-products"].expires_at is None

    async def test_create_invalidates_catalog_keys(
        self, admin_client: AsyncClient, anonymous_client: AsyncClient
    ):
        await _create(admin_client, category="home")
        assert (await anonymous_client.get("/api/v1/product/categories")).json()[
            "data"
        ] == ["home"]

        await _create(admin_client, category="garden")
        assert (await anonymous_client.get("/api/v1/product/categories")).json()[
            "data"
        ] == ["garden", "home"]

    async def test_delete_product(
        self, admin_client: AsyncClient, anonymous_client: AsyncClient
    ):
        product = await _create(admin_client)
        await anonymous_client.get(f"/api/v1/product/{product['id']}")

        response = await admin_client.delete(f"/api/v1/product/{product['id']}")
        assert response.status_code == 200

        response = await anonymous_client.get(f"/api/v1/product/{product['id']}")
        assert response.status_code == 404

    async def test_cache_outage_on_write_is_reported(
        self, admin_client: AsyncClient, cache_backend, monkeypatch
    ):
        async def refuse(keys):
            raise ConnectionError("cache down")

        monkeypatch.setattr(cache_backend, "delete", refuse)
        response = await admin_client.post("/api/v1/product/new", json=_product())
        assert response.status_code == 503
        assert response.json()["success"] is False

    async def test_cache_outage_on_read_fails_open(
        self, admin_client: AsyncClient, anonymous_client: AsyncClient, cache_backend, monkeypatch
    ):
        product = await _create(admin_client)

        async def refuse(*args, **kwargs):
            raise ConnectionError("cache down")

        monkeypatch.setattr(cache_backend, "get", refuse)
        monkeypatch.setattr(cache_backend, "set", refuse)
        response = await anonymous_client.get(f"/api/v1/product/{product['id']}")
        assert response.status_code == 200
        assert response.json()["data"]["id"] == product["id"]
