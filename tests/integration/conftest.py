"""Fixtures for HTTP API tests."""

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient


@pytest.fixture()
def client():
    from marketplace.api import cart_router, order_router, product_router, profile_router, register_error_handlers
    from marketplace.domain import marketplace

    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with marketplace.domain_context():
            return await call_next(request)

    register_error_handlers(app)
    app.include_router(profile_router)
    app.include_router(product_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    return TestClient(app)
