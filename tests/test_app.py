import pytest
from httpx import ASGITransport, AsyncClient


@pytest.mark.asyncio
async def test_root_reports_process_time(anonymous_client: AsyncClient):
    response = await anonymous_client.get("/")
    assert response.status_code == 200
    assert float(response.headers["X-Process-Time"]) >= 0


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(anonymous_client: AsyncClient):
    response = await anonymous_client.get("/api/v1/nowhere")
    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["statusCode"] == 404


@pytest.mark.asyncio
async def test_invalid_token_is_rejected(test_app):
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://testserver",
        headers={"Authorization": "Bearer forged"},
    ) as client:
        response = await client.get("/api/v1/order/my")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
