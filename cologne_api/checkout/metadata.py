"""
Sérialisation/désérialisation des métadonnées Stripe de la session Checkout.

Stripe n'accepte que des chaînes dans metadata: les montants et drapeaux sont
écrits en texte à la création de la session puis relus par le webhook.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .models import Coupon
from .pricing import PricedCart

# module cologne_api.checkout.metadata
def make_metadata(
    *,
    priced: PricedCart,
    user_id: Optional[str],
    order_id: str,
    coupon: Optional[Coupon] = None,
) -> Dict[str, str]:
    """
    Construit les métadonnées de la session.
    - orderId: UUID généré avant l'appel Stripe, clé de corrélation avec le webhook.
    - couponId/couponCode: chaîne vide (jamais None) si aucun coupon.
    """
    return {
        "userId": str(user_id or ""),
        "orderId": order_id,
        "subtotal": str(priced.subtotal),
        "taxAmount": str(priced.tax_amount),
        "discountAmount": str(priced.discount_amount),
        "skipShipping": "true" if priced.skip_shipping else "false",
        "skipTax": "true" if priced.skip_tax else "false",
        "couponId": (coupon.id or "") if coupon else "",
        "couponCode": (coupon.code or "") if coupon else "",
    }

def parse_amount(value: Any) -> int:
    """Entier depuis une valeur de metadata; 0 si absente ou illisible."""
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class OrderMetadata:
    user_id: str
    order_id: str
    subtotal: int
    tax_amount: int
    discount_amount: int
    coupon_id: str
    coupon_code: str

    @property
    def has_coupon(self) -> bool:
        return bool(self.coupon_id)


def extract_metadata_from_session(session: Dict[str, Any]) -> OrderMetadata:
    """
    Relit les métadonnées écrites par make_metadata depuis une session Stripe (dict).
    Tolérant: valeurs manquantes -> "" ou 0.
    """
    meta = (session or {}).get("metadata") or {}
    return OrderMetadata(
        user_id=meta.get("userId") or "",
        order_id=meta.get("orderId") or "",
        subtotal=parse_amount(meta.get("subtotal")),
        tax_amount=parse_amount(meta.get("taxAmount")),
        discount_amount=parse_amount(meta.get("discountAmount")),
        coupon_id=meta.get("couponId") or "",
        coupon_code=meta.get("couponCode") or "",
    )

def line_product(line: Dict[str, Any]) -> Dict[str, Any]:
    """Produit développé d'une ligne Stripe (expand line_items.data.price.product); {} sinon."""
    product = ((line or {}).get("price") or {}).get("product")
    return product if isinstance(product, dict) else {}

def line_product_id(line: Dict[str, Any]) -> str:
    return str((line_product(line).get("metadata") or {}).get("productId") or "")

def genuine_line_items(lines: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Lignes correspondant à de vrais produits (les lignes taxe/remise n'ont pas de productId)."""
    return [line for line in lines or [] if line_product_id(line)]
