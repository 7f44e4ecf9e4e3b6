"""
Cas d'usage 'checkout': orchestre cart, pricing, session_builder, stripe_client, repository.
"""
from typing import Any, Dict, Optional
from uuid import uuid4
import logging

from cologne_api.errors import GatewayError
from . import cart as cart_logic
from . import repository
from .metadata import extract_metadata_from_session, genuine_line_items, line_product, line_product_id
from .pricing import price_cart
from .session_builder import build_session_params
from .stripe_client import StripeGateway

logger = logging.getLogger(__name__)

DETAILS_EXPAND = (
    "line_items.data.price.product",
    "customer_details",
    "payment_intent",
    "shipping_cost.shipping_rate",
)

def create_checkout_session(
    body: Dict[str, Any],
    *,
    gateway: StripeGateway,
    base_url: str,
    collect_tax_id: bool = False,
) -> Dict[str, Any]:
    """
    Valide le panier, calcule les montants puis crée la session Stripe.
    - body: {items[], userId, email, shippingOption?, coupon?}
    - L'orderId est généré ici, avant l'appel Stripe, et voyage dans les métadonnées.
    Retour: {"sessionId", "url", "orderId"}
    """
    items = cart_logic.parse_items(body.get("items"))
    coupon = cart_logic.parse_coupon(body.get("coupon"))
    priced = price_cart(items, coupon)
    order_id = str(uuid4())

    params = build_session_params(
        items=items,
        priced=priced,
        order_id=order_id,
        base_url=base_url,
        user_id=body.get("userId"),
        email=body.get("email"),
        coupon=coupon,
        shipping_preference=body.get("shippingOption"),
        collect_tax_id=collect_tax_id,
    )
    session = gateway.create_session(params.to_stripe_params())
    logger.info(
        "checkout.session created session_id=%s order_id=%s subtotal=%s tax=%s discount=%s",
        session.get("id"), order_id, priced.subtotal, priced.tax_amount, priced.discount_amount,
    )
    return {"sessionId": session.get("id"), "url": session.get("url"), "orderId": order_id}

def get_session_details(session_id: str, *, gateway: StripeGateway) -> Dict[str, Any]:
    """
    Détails d'une session pour la page de confirmation du frontend.
    - Les lignes synthétiques (taxe, remise) sont exclues de items[]: taxe et remise sont renvoyées à part.
    - image_url: table products d'abord, sinon métadonnées produit Stripe.
    """
    try:
        session = gateway.get_session(session_id, expand=DETAILS_EXPAND)
    except GatewayError as e:
        raise GatewayError("Failed to retrieve order details") from e

    meta = extract_metadata_from_session(session)
    lines = ((session.get("line_items") or {}).get("data")) or []
    product_lines = genuine_line_items(lines)
    product_ids = [line_product_id(l) for l in product_lines]
    products = repository.get_products_map(product_ids)

    items = []
    for line, product_id in zip(product_lines, product_ids):
        product_meta = line_product(line).get("metadata") or {}
        items.append({
            "product_id": product_id,
            "description": line.get("description"),
            "quantity": line.get("quantity"),
            "amount_total": line.get("amount_total"),
            "image_url": (products.get(product_id) or {}).get("image_url") or product_meta.get("image_url") or None,
        })

    customer = session.get("customer_details") or {}
    shipping_cost = session.get("shipping_cost") or {}
    subtotal: Optional[int] = meta.subtotal or sum(int(i.get("amount_total") or 0) for i in items)
    return {
        "orderId": meta.order_id or None,
        "status": session.get("status"),
        "paymentStatus": session.get("payment_status"),
        "customer": {
            "name": customer.get("name") or "N/A",
            "email": customer.get("email") or "N/A",
        },
        "items": items,
        "total": session.get("amount_total"),
        "subtotal": subtotal,
        "shipping": int(shipping_cost.get("amount_total") or 0),
        "tax": meta.tax_amount,
        "discount": meta.discount_amount,
    }
