"""
Accès aux données pour la feature 'orders' (écritures du webhook Stripe).

Deux modes de persistance:
- "rpc": procédure process_stripe_webhook (commande + lignes dans une transaction)
- "tables": insert direct dans 'orders' puis 'order_items'
"""
from typing import Any, Callable, Optional
import logging

from supabase import Client

from cologne_api.errors import PersistenceError
from .models import OrderRecord

logger = logging.getLogger(__name__)

PERSISTENCE_MODES = ("rpc", "tables")
UNIQUE_VIOLATION = "23505"

# module cologne_api.orders.repository
def is_unique_violation(exc: BaseException) -> bool:
    """Violation d'unicité Postgres (ex: commande déjà enregistrée par une livraison précédente)."""
    code = str(getattr(exc, "code", "") or "")
    return code == UNIQUE_VIOLATION or "duplicate key" in str(exc).lower()


class OrderRepository:
    def __init__(self, get_client: Callable[[], Client], mode: str = "rpc"):
        if mode not in PERSISTENCE_MODES:
            raise ValueError(f"ORDER_PERSISTENCE invalide: {mode!r} (attendu: {', '.join(PERSISTENCE_MODES)})")
        self._get_client = get_client
        self.mode = mode

    def save_order(self, order: OrderRecord) -> int:
        """
        Enregistre la commande et ses lignes selon le mode configuré.
        Retourne le nombre de lignes de commande enregistrées.
        Soulève PersistenceError si la commande elle-même n'a pas pu être écrite.
        """
        if self.mode == "rpc":
            self.process_order_rpc(order)
            return len(order.items)
        self.insert_order(order)
        return self.insert_order_items(order)

    def process_order_rpc(self, order: OrderRecord) -> Any:
        try:
            res = self._get_client().rpc("process_stripe_webhook", order.to_rpc_params()).execute()
            return res.data
        except Exception as e:
            logger.exception("orders.repository.process_order_rpc failed order_id=%s session_id=%s", order.id, order.session_id)
            raise PersistenceError(duplicate=is_unique_violation(e)) from e

    def insert_order(self, order: OrderRecord) -> Optional[dict]:
        try:
            res = self._get_client().table("orders").insert(order.to_row()).execute()
        except Exception as e:
            logger.exception("orders.repository.insert_order failed order_id=%s session_id=%s", order.id, order.session_id)
            raise PersistenceError(duplicate=is_unique_violation(e)) from e
        rows = res.data or []
        return rows[0] if isinstance(rows, list) and rows else None

    def insert_order_items(self, order: OrderRecord) -> int:
        """
        Insère les lignes de la commande déjà créée.
        Un échec est journalisé sans annuler la commande (retourne 0).
        """
        if not order.items:
            return 0
        rows = [item.to_row(order.id) for item in order.items]
        try:
            self._get_client().table("order_items").insert(rows).execute()
            return len(rows)
        except Exception:
            logger.exception("orders.repository.insert_order_items failed order_id=%s items=%s", order.id, len(rows))
            return 0

    def update_coupon_usage(self, coupon_id: str, user_id: str) -> bool:
        """Incrémente l'usage du coupon (procédure update_coupon_usage); échec journalisé, jamais propagé."""
        try:
            self._get_client().rpc("update_coupon_usage", {"coupon_id": coupon_id, "user_id": user_id or None}).execute()
            return True
        except Exception:
            logger.exception("orders.repository.update_coupon_usage failed coupon_id=%s user_id=%s", coupon_id, user_id)
            return False
