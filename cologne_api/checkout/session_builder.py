"""
Construction des paramètres de création d'une session Stripe Checkout.

Les champs conditionnels (options de livraison, codes promo, tax id) sont des
slots Optional d'une valeur immuable; seuls les slots renseignés partent vers Stripe.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .metadata import make_metadata
from .models import CartItem, Coupon
from .pricing import PricedCart, ShippingTier, shipping_tiers

CURRENCY = "usd"
TAX_LINE_NAME = "Sales Tax"
DISCOUNT_LINE_NAME = "Discount"


@dataclass(frozen=True)
class CheckoutSessionParams:
    line_items: Tuple[Dict[str, Any], ...]
    metadata: Dict[str, str]
    success_url: str
    cancel_url: str
    customer_email: Optional[str] = None
    shipping_options: Optional[Tuple[Dict[str, Any], ...]] = None
    allow_promotion_codes: Optional[bool] = None
    tax_id_collection: Optional[Dict[str, Any]] = None

    @property
    def order_id(self) -> str:
        return self.metadata["orderId"]

    def to_stripe_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "payment_method_types": ["card"],
            "mode": "payment",
            "line_items": list(self.line_items),
            "metadata": dict(self.metadata),
            "success_url": self.success_url,
            "cancel_url": self.cancel_url,
            "billing_address_collection": "required",
            "shipping_address_collection": {"allowed_countries": ["US"]},
        }
        if self.customer_email:
            params["customer_email"] = self.customer_email
        if self.shipping_options is not None:
            params["shipping_options"] = list(self.shipping_options)
        if self.allow_promotion_codes is not None:
            params["allow_promotion_codes"] = self.allow_promotion_codes
        if self.tax_id_collection is not None:
            params["tax_id_collection"] = self.tax_id_collection
        return params


# module cologne_api.checkout.session_builder
def item_line(item: CartItem) -> Dict[str, Any]:
    product_data: Dict[str, Any] = {
        "name": item.name,
        "metadata": {"productId": item.id, "image_url": item.image_url or ""},
    }
    if item.description:
        product_data["description"] = item.description
    if item.image_url:
        product_data["images"] = [item.image_url]
    return {
        "price_data": {
            "currency": CURRENCY,
            "product_data": product_data,
            "unit_amount": item.price,
        },
        "quantity": item.quantity,
    }

def tax_line(amount: int) -> Dict[str, Any]:
    return {
        "price_data": {
            "currency": CURRENCY,
            "product_data": {"name": TAX_LINE_NAME, "description": "NY sales tax (8.875%)"},
            "unit_amount": amount,
        },
        "quantity": 1,
    }

def discount_line(amount: int, coupon: Optional[Coupon]) -> Dict[str, Any]:
    name = DISCOUNT_LINE_NAME
    if coupon and coupon.code:
        name = f"{DISCOUNT_LINE_NAME} ({coupon.code})"
    return {
        "price_data": {
            "currency": CURRENCY,
            "product_data": {"name": name},
            "unit_amount": -amount,
        },
        "quantity": 1,
    }

def shipping_option(tier: ShippingTier) -> Dict[str, Any]:
    return {
        "shipping_rate_data": {
            "type": "fixed_amount",
            "fixed_amount": {"amount": tier.amount, "currency": CURRENCY},
            "display_name": tier.display_name,
            "delivery_estimate": {
                "minimum": {"unit": "business_day", "value": tier.min_days},
                "maximum": {"unit": "business_day", "value": tier.max_days},
            },
        }
    }

def build_line_items(items: Sequence[CartItem], priced: PricedCart, coupon: Optional[Coupon] = None) -> List[Dict[str, Any]]:
    """
    Une ligne par article, puis les lignes synthétiques (taxe, remise).
    Les lignes synthétiques n'ont pas de productId: le webhook les écarte ainsi.
    """
    lines = [item_line(item) for item in items]
    if priced.has_tax_line:
        lines.append(tax_line(priced.tax_amount))
    if priced.has_discount_line:
        lines.append(discount_line(priced.discount_amount, coupon))
    return lines

def redirect_urls(base_url: str) -> Tuple[str, str]:
    base = (base_url or "").rstrip("/")
    return f"{base}/success?session_id={{CHECKOUT_SESSION_ID}}", f"{base}/cart"

def resolve_base_url(frontend_url: Optional[str], origin: Optional[str], fallback: str = "") -> str:
    """URL frontend configurée, sinon l'origine déclarée par la requête, sinon fallback."""
    for candidate in (frontend_url, origin, fallback):
        if candidate and candidate.strip():
            return candidate.strip().rstrip("/")
    return ""

def build_session_params(
    *,
    items: Sequence[CartItem],
    priced: PricedCart,
    order_id: str,
    base_url: str,
    user_id: Optional[str] = None,
    email: Optional[str] = None,
    coupon: Optional[Coupon] = None,
    shipping_preference: Optional[str] = None,
    collect_tax_id: bool = False,
) -> CheckoutSessionParams:
    success_url, cancel_url = redirect_urls(base_url)
    tiers = shipping_tiers(priced, shipping_preference)
    return CheckoutSessionParams(
        line_items=tuple(build_line_items(items, priced, coupon)),
        metadata=make_metadata(priced=priced, user_id=user_id, order_id=order_id, coupon=coupon),
        success_url=success_url,
        cancel_url=cancel_url,
        customer_email=email or None,
        shipping_options=tuple(shipping_option(t) for t in tiers) if tiers else None,
        # Stripe refuse les codes promo quand une remise est déjà appliquée
        allow_promotion_codes=True if coupon is None else None,
        tax_id_collection={"enabled": True} if collect_tax_id else None,
    )
