import pytest
from commerce.api import (
    cart_router,
    coupon_router,
    order_router,
    product_router,
    register_exception_handlers,
)
from commerce.domain import commerce
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

@pytest.fixture()
def client():
    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with commerce.domain_context():
            return await call_next(request)

    app.include_router(product_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(coupon_router)
    register_exception_handlers(app)
    return TestClient(app)


@pytest.fixture()
def product_id(client):
    response = client.post(
        "/products",
        json={"name": "Widget", "price": 20.0, "initial_stock": 5},
        headers={"X-User-Id": "admin-001", "X-User-Role": "admin"},
    )
    assert response.status_code == 201
    return response.json()["product_id"]
