"""Products API test cases."""
import pytest
from httpx import AsyncClient
from framework.middleware.logging_md import TRACE_HEADER

BASE_URL = "/api/products"


class TestCreateProduct:
    """Test POST /api/products."""

    @pytest.mark.asyncio
    async def test_create_success(self, client: AsyncClient):
        """Valid input returns 201, the projection and its location."""
        response = await client.post(BASE_URL, json={"description": "Widget", "price": 9.99})

        assert response.status_code == 201
        data = response.json()
        assert data["description"] == "Widget"
        assert data["price"] == 9.99
        assert data["id"] > 0
        assert response.headers["location"] == f"{BASE_URL}/{data['id']}"

    @pytest.mark.asyncio
    async def test_create_invalid_returns_all_errors(self, client: AsyncClient):
        """Both rule violations are reported together."""
        response = await client.post(BASE_URL, json={"description": "", "price": -1})

        assert response.status_code == 400
        assert response.json() == [
            {"code": "Product.Description", "description": "Description cannot be null", "type": "Validation"},
            {"code": "Product.Price", "description": "The price must be greater than 0", "type": "Validation"},
        ]

        listing = await client.get(BASE_URL)
        assert listing.json()["total_count"] == 0

    @pytest.mark.asyncio
    async def test_create_null_description(self, client: AsyncClient):
        response = await client.post(BASE_URL, json={"description": None, "price": 5})

        assert response.status_code == 400
        assert [error["code"] for error in response.json()] == ["Product.Description"]

    @pytest.mark.asyncio
    async def test_create_description_too_long(self, client: AsyncClient):
        response = await client.post(BASE_URL, json={"description": "x" * 257, "price": 1})

        assert response.status_code == 400
        assert response.json()[0]["description"] == "Description cannot exceed 256 characters"

    @pytest.mark.asyncio
    async def test_create_malformed_body(self, client: AsyncClient):
        """Schema violations are handled before the domain sees the request."""
        response = await client.post(BASE_URL, json={"description": "Widget"})

        assert response.status_code == 422
        data = response.json()
        assert data["code"] == 422
        assert data["message"] == "Invalid request parameters"
        assert data["data"]


class TestGetProduct:
    """Test GET /api/products and /api/products/{id}."""

    @pytest.mark.asyncio
    async def test_get_existing(self, client: AsyncClient):
        created = (await client.post(BASE_URL, json={"description": "Gadget", "price": 19.5})).json()

        response = await client.get(f"{BASE_URL}/{created['id']}")

        assert response.status_code == 200
        assert response.json() == {"id": created["id"], "description": "Gadget", "price": 19.5}

    @pytest.mark.asyncio
    async def test_get_missing(self, client: AsyncClient):
        response = await client.get(f"{BASE_URL}/9999")

        assert response.status_code == 404
        assert response.json() == [
            {"code": "Product.NotFound", "description": "Product with 9999 not found", "type": "NotFound"}
        ]

    @pytest.mark.asyncio
    async def test_list_products(self, client: AsyncClient, sample_products):
        response = await client.get(BASE_URL, params={"page": 1, "page_size": 2})

        assert response.status_code == 200
        data = response.json()
        assert data["total_count"] == 3
        assert data["page"] == 1
        assert data["page_size"] == 2
        assert [item["description"] for item in data["items"]] == ["Widget", "Gadget"]

    @pytest.mark.asyncio
    async def test_list_caps_page_size(self, client: AsyncClient, sample_products):
        response = await client.get(BASE_URL, params={"page": 0, "page_size": 1000})

        data = response.json()
        assert data["page"] == 1
        assert data["page_size"] == 100
        assert len(data["items"]) == 3


class TestDeleteProduct:
    """Test DELETE /api/products/{id}."""

    @pytest.mark.asyncio
    async def test_delete_then_not_found(self, client: AsyncClient):
        created = (await client.post(BASE_URL, json={"description": "Gizmo", "price": 5})).json()
        url = f"{BASE_URL}/{created['id']}"

        response = await client.delete(url)
        assert response.status_code == 204

        assert (await client.get(url)).status_code == 404
        assert (await client.delete(url)).status_code == 404


class TestTracing:
    @pytest.mark.asyncio
    async def test_trace_id_is_echoed(self, client: AsyncClient):
        response = await client.get(f"{BASE_URL}/1", headers={TRACE_HEADER: "trace-123"})
        assert response.headers[TRACE_HEADER] == "trace-123"

    @pytest.mark.asyncio
    async def test_trace_id_is_generated(self, client: AsyncClient):
        response = await client.get(BASE_URL)
        assert response.headers[TRACE_HEADER]
