"""
Logique panier pure (pas de Stripe, pas de DB): validation du payload client.
"""
import logging
from typing import Any, List, Optional

from pydantic import ValidationError as PydanticValidationError

from cologne_api.errors import ValidationError
from .models import CartItem, Coupon

logger = logging.getLogger(__name__)

# module cologne_api.checkout.cart
def parse_items(items: Any) -> List[CartItem]:
    """
    Valide un panier brut [{id, name, price, quantity, ...}, ...].
    - Rejette un panier absent, vide ou qui n'est pas une liste.
    - Rejette toute ligne sans id, sans prix entier >= 0 ou sans quantité > 0.
    - Soulève ValidationError (400) avant tout appel Stripe.
    """
    if not isinstance(items, list) or not items:
        raise ValidationError()
    parsed: List[CartItem] = []
    for index, raw in enumerate(items):
        if not isinstance(raw, dict):
            raise ValidationError()
        try:
            parsed.append(CartItem.model_validate(raw))
        except PydanticValidationError as e:
            logger.info("checkout.cart.parse_items rejected index=%s errors=%s", index, e.error_count())
            raise ValidationError() from e
    return parsed

def parse_coupon(raw: Any) -> Optional[Coupon]:
    """
    Valide le coupon optionnel {id, code, discount_type, discount_value}.
    Le coupon est déjà vérifié côté frontend/DB; on ne contrôle que sa forme.
    """
    if raw is None or raw == "" or raw == {}:
        return None
    if not isinstance(raw, dict):
        raise ValidationError("Invalid coupon data")
    try:
        return Coupon.model_validate(raw)
    except PydanticValidationError as e:
        raise ValidationError("Invalid coupon data") from e
