# module cologne_api.orders.models
"""Enregistrements commande / lignes de commande reconstruits depuis une session Stripe payée."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

ORDER_STATUS_PENDING = "pending"
ORDER_STATUS_COMPLETED = "completed"


@dataclass(frozen=True)
class OrderItemRecord:
    product_id: str
    quantity: int
    price_at_time: int
    image_url: Optional[str] = None

    def to_row(self, order_id: Optional[str] = None) -> Dict[str, Any]:
        row: Dict[str, Any] = {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "price_at_time": self.price_at_time,
            "image_url": self.image_url,
        }
        if order_id is not None:
            row["order_id"] = order_id
        return row


@dataclass(frozen=True)
class OrderRecord:
    id: str
    user_id: str
    session_id: str
    total: int
    status: str = ORDER_STATUS_COMPLETED
    subtotal: int = 0
    tax_amount: int = 0
    discount_amount: int = 0
    shipping_cost: int = 0
    shipping_name: Optional[str] = None
    shipping_address: Optional[Dict[str, Any]] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    coupon_id: str = ""
    items: List[OrderItemRecord] = field(default_factory=list)

    def to_row(self) -> Dict[str, Any]:
        """Ligne de la table 'orders' (mode inserts directs)."""
        return {
            "id": self.id,
            "user_id": self.user_id or None,
            "status": self.status,
            "total": self.total,
            "subtotal": self.subtotal,
            "tax_amount": self.tax_amount,
            "discount_amount": self.discount_amount,
            "shipping_cost": self.shipping_cost,
            "shipping_name": self.shipping_name,
            "shipping_address": self.shipping_address,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "stripe_session_id": self.session_id,
        }

    def to_rpc_params(self) -> Dict[str, Any]:
        """Arguments de la procédure process_stripe_webhook."""
        return {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "order_id": self.id,
            "total": self.total,
            "items": [item.to_row() for item in self.items],
        }
