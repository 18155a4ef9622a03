from __future__ import annotations

import json
from typing import Any, Callable, Generator

import httpx
import pytest
from fastapi.testclient import TestClient

from payrelay_api.api.deps import get_payment_service
from payrelay_api.app import create_app
from payrelay_api.core.config import Settings
from payrelay_api.modules.payments.service import PaymentService

FRONTEND_URL = "http://localhost:3000"

Responder = Callable[[httpx.Request], httpx.Response]


class FakeVendor:
    """Stands in for a provider API; records every request it receives."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], httpx.Response | Responder | Exception] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, response: httpx.Response | Responder | Exception) -> None:
        self.routes[(method.upper(), path)] = response

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": f"no route for {request.method} {request.url.path}"})
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(request)
        return route

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def json_body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "ENV": "test",
        "DEBUG": False,
        "FRONTEND_URL": FRONTEND_URL,
        "PUBLIC_BASE_URL": None,
        "CASHFREE_CLIENT_ID": "cf_test_id",
        "CASHFREE_CLIENT_SECRET": "cf_test_secret",
        "CASHFREE_ENVIRONMENT": "sandbox",
        "PHONEPE_MERCHANT_ID": "PGTESTPAYUAT",
        "PHONEPE_SALT_KEY": "099eb0cd-02cf-4e2a-8aca-3e6c6aff0399",
        "PHONEPE_SALT_INDEX": 1,
        "PAYPAL_CLIENT_ID": "pp_test_id",
        "PAYPAL_CLIENT_SECRET": "pp_test_secret",
        "PAYPAL_MODE": "sandbox",
        "SMTP_HOST": None,
        "OTEL_ENABLED": False,
        "OTEL_EXPORTER_OTLP_ENDPOINT": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture()
def settings_factory() -> Callable[..., Settings]:
    return make_settings


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
def vendor() -> FakeVendor:
    return FakeVendor()


@pytest.fixture()
def client(settings: Settings, vendor: FakeVendor) -> Generator[TestClient, None, None]:
    app = create_app(settings=settings)
    app.dependency_overrides[get_payment_service] = lambda: PaymentService(
        settings, transport=vendor.transport
    )
    with TestClient(app) as test_client:
        yield test_client
