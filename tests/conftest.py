import os

# Pas de Redis en tests: le lifespan désactive le rate limiting
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import json
from typing import Any, Dict, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient

from cologne_api.app import app as fastapi_app
from cologne_api.app_setup.dependencies import get_gateway, get_order_repository
from cologne_api.checkout.metadata import make_metadata
from cologne_api.checkout.pricing import PricedCart
from cologne_api.errors import GatewayError, SignatureError

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


class FakeGateway:
    """Remplace StripeGateway: enregistre les appels, sessions servies depuis un dict."""

    def __init__(self):
        self.created: List[Dict[str, Any]] = []
        self.retrieved: List[tuple] = []
        self.sessions: Dict[str, Dict[str, Any]] = {}
        self.create_error: Optional[Exception] = None

    def create_session(self, params: Dict[str, Any]) -> Dict[str, Any]:
        if self.create_error:
            raise self.create_error
        self.created.append(params)
        return {"id": "cs_test_123", "url": "https://checkout.stripe.test/c/pay/cs_test_123"}

    def get_session(self, session_id: str, expand=None) -> Dict[str, Any]:
        self.retrieved.append((session_id, tuple(expand or ())))
        if session_id not in self.sessions:
            raise GatewayError("No such checkout.session")
        return self.sessions[session_id]

    def parse_event(self, payload: bytes, sig_header: Optional[str]) -> Dict[str, Any]:
        if not sig_header:
            raise SignatureError("Missing Stripe-Signature header")
        if sig_header != "valid":
            raise SignatureError("Webhook Error: No signatures found matching the expected signature for payload")
        return json.loads(payload)


class FakeOrderRepository:
    mode = "rpc"

    def __init__(self):
        self.orders = []
        self.coupon_usage = []
        self.save_error: Optional[Exception] = None

    def save_order(self, order) -> int:
        if self.save_error:
            raise self.save_error
        self.orders.append(order)
        return len(order.items)

    def update_coupon_usage(self, coupon_id: str, user_id: str) -> bool:
        self.coupon_usage.append((coupon_id, user_id))
        return True


@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()

@pytest.fixture()
def order_repository() -> FakeOrderRepository:
    return FakeOrderRepository()

@pytest.fixture()
def client(app, gateway, order_repository) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_order_repository] = lambda: order_repository
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()

# Pas d'accès Supabase en tests: la table products est vide par défaut
@pytest.fixture(autouse=True)
def mock_products_lookup(monkeypatch):
    monkeypatch.setattr("cologne_api.checkout.repository.fetch_products_by_ids", lambda ids: [])


def make_product_line(product_id: str, name: str, unit_amount: int, quantity: int, image_url: str = "") -> Dict[str, Any]:
    return {
        "description": name,
        "quantity": quantity,
        "amount_total": unit_amount * quantity,
        "price": {
            "unit_amount": unit_amount,
            "product": {
                "name": name,
                "images": [image_url] if image_url else [],
                "metadata": {"productId": product_id, "image_url": image_url},
            },
        },
    }

def make_synthetic_line(name: str, amount: int) -> Dict[str, Any]:
    return {
        "description": name,
        "quantity": 1,
        "amount_total": amount,
        "price": {"unit_amount": amount, "product": {"name": name, "metadata": {}}},
    }

@pytest.fixture()
def paid_session() -> Dict[str, Any]:
    """Session Stripe payée, telle que relue avec line_items/shipping_cost développés."""
    priced = PricedCart(subtotal=2000, tax_amount=177)
    return {
        "id": "cs_test_123",
        "object": "checkout.session",
        "status": "complete",
        "payment_status": "paid",
        "amount_subtotal": 2177,
        "amount_total": 2677,
        "customer_email": "ada@example.com",
        "customer_details": {"name": "Ada Lovelace", "email": "ada@example.com"},
        "collected_information": {
            "shipping_details": {
                "name": "Ada Lovelace",
                "address": {
                    "line1": "1 Perfume Street",
                    "line2": None,
                    "city": "New York",
                    "state": "NY",
                    "postal_code": "10001",
                    "country": "US",
                },
            }
        },
        "shipping_cost": {"amount_total": 500, "shipping_rate": {"display_name": "Standard Shipping"}},
        "metadata": make_metadata(priced=priced, user_id="user-1", order_id="8b0d5c3e-4f7a-4a51-9a3e-0d2c5f1e6b7a"),
        "line_items": {
            "data": [
                make_product_line("p1", "Oud Noir", 1000, 2, "https://cdn.test/oud.jpg"),
                make_synthetic_line("Sales Tax", 177),
            ]
        },
    }
