"""
Réconciliation des commandes à partir des webhooks Stripe.

Sur checkout.session.completed:
  1) relit la session complète chez Stripe (le payload du webhook n'a pas les expansions)
  2) écarte les lignes synthétiques (taxe, remise): elles n'ont pas de productId
  3) relit taxe/remise/coupon depuis les métadonnées posées à la création
  4) enregistre la commande puis ses lignes, et l'usage du coupon
"""
from typing import Any, Dict, List, Optional, Tuple
import logging

from cologne_api.checkout import repository as products_repo
from cologne_api.checkout.metadata import (
    extract_metadata_from_session,
    genuine_line_items,
    line_product,
    line_product_id,
)
from cologne_api.checkout.stripe_client import StripeGateway
from cologne_api.errors import PersistenceError
from .models import ORDER_STATUS_COMPLETED, OrderItemRecord, OrderRecord
from .repository import OrderRepository

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
SESSION_EXPAND = (
    "line_items.data.price.product",
    "shipping_cost.shipping_rate",
    "customer_details",
)

# module cologne_api.orders.reconciler
def session_line_items(session: Dict[str, Any]) -> List[Dict[str, Any]]:
    return ((session or {}).get("line_items") or {}).get("data") or []

def shipping_from_session(session: Dict[str, Any]) -> Tuple[int, Optional[str]]:
    """(montant, nom du tarif) de la livraison choisie dans Checkout; (0, None) si aucune."""
    shipping_cost = (session or {}).get("shipping_cost") or {}
    amount = shipping_cost.get("amount_total") or 0
    rate = shipping_cost.get("shipping_rate")
    name = rate.get("display_name") if isinstance(rate, dict) else None
    return int(amount), name

def shipping_address_from_session(session: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Adresse de livraison collectée par Checkout.
    Les versions récentes de l'API la placent sous collected_information.shipping_details.
    """
    session = session or {}
    details = (
        ((session.get("collected_information") or {}).get("shipping_details"))
        or session.get("shipping_details")
        or {}
    )
    address = details.get("address")
    if not address:
        return None
    return {"name": details.get("name"), **address}

def order_item_from_line(line: Dict[str, Any], products: Dict[str, Dict[str, Any]]) -> OrderItemRecord:
    product = line_product(line)
    product_id = line_product_id(line)
    image_url = (
        (product.get("metadata") or {}).get("image_url")
        or (products.get(product_id) or {}).get("image_url")
        or next(iter(product.get("images") or []), None)
    )
    return OrderItemRecord(
        product_id=product_id,
        quantity=int(line.get("quantity") or 0),
        price_at_time=int(((line.get("price") or {}).get("unit_amount")) or 0),
        image_url=image_url or None,
    )

def build_order(session: Dict[str, Any]) -> OrderRecord:
    """Reconstruit la commande (et ses lignes) depuis une session Stripe développée."""
    meta = extract_metadata_from_session(session)
    lines = genuine_line_items(session_line_items(session))
    missing_images = [
        line_product_id(line) for line in lines
        if not (line_product(line).get("metadata") or {}).get("image_url")
    ]
    products = products_repo.get_products_map(missing_images) if missing_images else {}
    shipping_cost, shipping_name = shipping_from_session(session)
    customer = session.get("customer_details") or {}
    return OrderRecord(
        id=meta.order_id,
        user_id=meta.user_id,
        session_id=session.get("id") or "",
        total=int(session.get("amount_total") or 0),
        status=ORDER_STATUS_COMPLETED,
        subtotal=meta.subtotal,
        tax_amount=meta.tax_amount,
        discount_amount=meta.discount_amount,
        shipping_cost=shipping_cost,
        shipping_name=shipping_name,
        shipping_address=shipping_address_from_session(session),
        customer_name=customer.get("name"),
        customer_email=customer.get("email") or session.get("customer_email"),
        coupon_id=meta.coupon_id,
        items=[order_item_from_line(line, products) for line in lines],
    )

def reconcile_session(session_id: str, *, gateway: StripeGateway, repository: OrderRepository) -> Optional[OrderRecord]:
    """
    Relit la session puis enregistre la commande.
    - Retourne None si la session n'a pas d'orderId (session créée hors de cette API).
    - Une livraison dupliquée (commande déjà présente) est journalisée et acquittée.
    - GatewayError / PersistenceError remontent: Stripe relivrera l'événement.
    """
    session = gateway.get_session(session_id, expand=SESSION_EXPAND)
    if not extract_metadata_from_session(session).order_id:
        logger.warning("orders.webhook session without orderId session_id=%s", session_id)
        return None
    order = build_order(session)

    try:
        saved_items = repository.save_order(order)
    except PersistenceError as e:
        if e.duplicate:
            logger.warning("orders.webhook duplicate delivery order_id=%s session_id=%s", order.id, session_id)
            return order
        raise

    if order.coupon_id:
        repository.update_coupon_usage(order.coupon_id, order.user_id)

    logger.info(
        "orders.webhook processed order_id=%s session_id=%s items=%s saved_items=%s",
        order.id, session_id, len(order.items), saved_items,
    )
    return order

def handle_event(event: Dict[str, Any], *, gateway: StripeGateway, repository: OrderRepository) -> Dict[str, Any]:
    """
    Traite un événement déjà vérifié (signature contrôlée en amont).
    Tous les types sont acquittés: {"received": True}.
    """
    event_type = (event or {}).get("type")
    if event_type != CHECKOUT_COMPLETED:
        logger.info("orders.webhook ignored type=%s", event_type)
        return {"received": True}

    session_obj = ((event.get("data") or {}).get("object")) or {}
    session_id = session_obj.get("id") or ""
    if not session_id:
        logger.warning("orders.webhook event without session id event_id=%s", event.get("id"))
        return {"received": True}
    reconcile_session(session_id, gateway=gateway, repository=repository)
    return {"received": True}
