import pytest

from cologne_api.checkout.metadata import (
    extract_metadata_from_session,
    genuine_line_items,
    line_product_id,
    make_metadata,
    parse_amount,
)
from cologne_api.checkout.models import Coupon, DiscountType
from cologne_api.checkout.pricing import PricedCart

from conftest import make_product_line, make_synthetic_line


def test_metadata_round_trip_with_coupon():
    coupon = Coupon(id="c1", code="TEN", discount_type=DiscountType.PERCENTAGE, discount_value=10)
    priced = PricedCart(subtotal=2000, tax_amount=177, discount_amount=200)
    meta = make_metadata(priced=priced, user_id="user-1", order_id="order-1", coupon=coupon)
    parsed = extract_metadata_from_session({"metadata": meta})
    assert parsed.user_id == "user-1"
    assert parsed.order_id == "order-1"
    assert parsed.subtotal == 2000
    assert parsed.tax_amount == 177
    assert parsed.discount_amount == 200
    assert parsed.coupon_id == "c1"
    assert parsed.coupon_code == "TEN"
    assert parsed.has_coupon is True

def test_skip_flags_written_as_text():
    meta = make_metadata(priced=PricedCart(subtotal=100, skip_shipping=True, skip_tax=True), user_id=None, order_id="o")
    assert meta["skipShipping"] == "true"
    assert meta["skipTax"] == "true"
    assert meta["userId"] == ""

@pytest.mark.parametrize("value, expected", [
    ("177", 177),
    (" 42 ", 42),
    (7, 7),
    ("oops", 0),
    ("", 0),
    (None, 0),
    ("12.5", 0),
])
def test_parse_amount(value, expected):
    assert parse_amount(value) == expected

def test_extract_metadata_tolerates_missing_values():
    parsed = extract_metadata_from_session({"metadata": {"taxAmount": "oops"}})
    assert parsed.tax_amount == 0
    assert parsed.order_id == ""
    assert parsed.has_coupon is False
    assert extract_metadata_from_session({}).subtotal == 0

def test_genuine_line_items_drop_synthetic_lines():
    lines = [
        make_product_line("p1", "Oud Noir", 1000, 2),
        make_synthetic_line("Sales Tax", 177),
        make_synthetic_line("Discount (TEN)", -200),
        {"description": "Unexpanded", "price": {"product": "prod_123"}},
    ]
    kept = genuine_line_items(lines)
    assert [line_product_id(l) for l in kept] == ["p1"]
    assert genuine_line_items(None) == []
