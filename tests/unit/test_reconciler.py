import copy

import pytest

from cologne_api.errors import GatewayError, PersistenceError
from cologne_api.orders import reconciler
from cologne_api.orders.reconciler import build_order, handle_event, reconcile_session

from conftest import FakeGateway, FakeOrderRepository, make_product_line

ORDER_ID = "8b0d5c3e-4f7a-4a51-9a3e-0d2c5f1e6b7a"

def _event(session_id="cs_test_123", event_type="checkout.session.completed"):
    return {"id": "evt_1", "type": event_type, "data": {"object": {"id": session_id, "object": "checkout.session"}}}


def test_build_order_from_paid_session(paid_session):
    order = build_order(paid_session)
    assert order.id == ORDER_ID
    assert order.user_id == "user-1"
    assert order.session_id == "cs_test_123"
    assert order.total == 2677
    assert order.subtotal == 2000
    assert order.tax_amount == 177
    assert order.discount_amount == 0
    assert order.shipping_cost == 500
    assert order.shipping_name == "Standard Shipping"
    assert order.shipping_address["city"] == "New York"
    assert order.shipping_address["name"] == "Ada Lovelace"
    assert order.customer_email == "ada@example.com"
    # La ligne "Sales Tax" n'est pas un article
    assert len(order.items) == 1
    item = order.items[0]
    assert (item.product_id, item.quantity, item.price_at_time) == ("p1", 2, 1000)
    assert item.image_url == "https://cdn.test/oud.jpg"

def test_build_order_unparseable_metadata_defaults_to_zero(paid_session):
    paid_session["metadata"]["taxAmount"] = "oops"
    assert build_order(paid_session).tax_amount == 0

def test_build_order_without_shipping(paid_session):
    paid_session["shipping_cost"] = None
    paid_session.pop("collected_information")
    order = build_order(paid_session)
    assert order.shipping_cost == 0
    assert order.shipping_name is None
    assert order.shipping_address is None

def test_build_order_reads_legacy_shipping_details(paid_session):
    paid_session["shipping_details"] = paid_session.pop("collected_information")["shipping_details"]
    assert build_order(paid_session).shipping_address["postal_code"] == "10001"

def test_image_falls_back_to_products_table(monkeypatch, paid_session):
    paid_session["line_items"]["data"] = [make_product_line("p2", "Musk", 700, 1)]
    asked = []
    def fake_fetch(ids):
        asked.append(list(ids))
        return [{"id": "p2", "image_url": "https://cdn.test/musk.jpg"}]
    monkeypatch.setattr("cologne_api.checkout.repository.fetch_products_by_ids", fake_fetch)

    order = build_order(paid_session)
    assert asked == [["p2"]]
    assert order.items[0].image_url == "https://cdn.test/musk.jpg"

def test_image_lookup_skipped_when_metadata_has_images(monkeypatch, paid_session):
    def fail(ids):
        raise AssertionError("lookup inutile")
    monkeypatch.setattr("cologne_api.checkout.repository.fetch_products_by_ids", fail)
    build_order(paid_session)

def test_image_missing_everywhere_is_none(paid_session):
    paid_session["line_items"]["data"] = [make_product_line("p2", "Musk", 700, 1)]
    assert build_order(paid_session).items[0].image_url is None

def test_reconcile_saves_order(paid_session):
    gateway, repository = FakeGateway(), FakeOrderRepository()
    gateway.sessions["cs_test_123"] = paid_session

    order = reconcile_session("cs_test_123", gateway=gateway, repository=repository)
    assert order.id == ORDER_ID
    assert repository.orders == [order]
    assert repository.coupon_usage == []
    session_id, expand = gateway.retrieved[0]
    assert session_id == "cs_test_123"
    assert "line_items.data.price.product" in expand

def test_reconcile_records_coupon_usage(paid_session):
    paid_session["metadata"]["couponId"] = "c1"
    gateway, repository = FakeGateway(), FakeOrderRepository()
    gateway.sessions["cs_test_123"] = paid_session

    reconcile_session("cs_test_123", gateway=gateway, repository=repository)
    assert repository.coupon_usage == [("c1", "user-1")]

def test_reconcile_without_order_id_is_skipped(paid_session):
    paid_session["metadata"] = {}
    gateway, repository = FakeGateway(), FakeOrderRepository()
    gateway.sessions["cs_test_123"] = paid_session

    assert reconcile_session("cs_test_123", gateway=gateway, repository=repository) is None
    assert repository.orders == []

def test_reconcile_without_order_id_skips_products_lookup(monkeypatch, paid_session):
    paid_session["metadata"] = {}
    paid_session["line_items"]["data"] = [make_product_line("p2", "Musk", 700, 1)]
    def fail(ids):
        raise AssertionError("aucune lecture products pour une session étrangère")
    monkeypatch.setattr("cologne_api.checkout.repository.fetch_products_by_ids", fail)
    gateway = FakeGateway()
    gateway.sessions["cs_test_123"] = paid_session

    assert reconcile_session("cs_test_123", gateway=gateway, repository=FakeOrderRepository()) is None

def test_reconcile_duplicate_delivery_is_acknowledged(paid_session):
    paid_session["metadata"]["couponId"] = "c1"
    gateway, repository = FakeGateway(), FakeOrderRepository()
    gateway.sessions["cs_test_123"] = paid_session
    repository.save_error = PersistenceError(duplicate=True)

    order = reconcile_session("cs_test_123", gateway=gateway, repository=repository)
    assert order.id == ORDER_ID
    # Le coupon a déjà été compté lors de la première livraison
    assert repository.coupon_usage == []

def test_reconcile_propagates_persistence_failure(paid_session):
    gateway, repository = FakeGateway(), FakeOrderRepository()
    gateway.sessions["cs_test_123"] = paid_session
    repository.save_error = PersistenceError()
    with pytest.raises(PersistenceError):
        reconcile_session("cs_test_123", gateway=gateway, repository=repository)

def test_reconcile_propagates_gateway_failure():
    with pytest.raises(GatewayError):
        reconcile_session("cs_unknown", gateway=FakeGateway(), repository=FakeOrderRepository())

@pytest.mark.parametrize("event_type", ["payment_intent.succeeded", "checkout.session.expired", None])
def test_handle_event_ignores_other_types(event_type):
    gateway, repository = FakeGateway(), FakeOrderRepository()
    assert handle_event(_event(event_type=event_type), gateway=gateway, repository=repository) == {"received": True}
    assert gateway.retrieved == []
    assert repository.orders == []

def test_handle_event_without_session_id():
    gateway = FakeGateway()
    assert handle_event(_event(session_id=""), gateway=gateway, repository=FakeOrderRepository()) == {"received": True}
    assert gateway.retrieved == []

def test_handle_event_completed(paid_session):
    gateway, repository = FakeGateway(), FakeOrderRepository()
    gateway.sessions["cs_test_123"] = copy.deepcopy(paid_session)
    assert handle_event(_event(), gateway=gateway, repository=repository) == {"received": True}
    assert [o.id for o in repository.orders] == [ORDER_ID]

def test_session_expansions_cover_line_items():
    assert "line_items.data.price.product" in reconciler.SESSION_EXPAND
    assert "shipping_cost.shipping_rate" in reconciler.SESSION_EXPAND
