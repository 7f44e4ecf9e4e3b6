"""
Calcul du prix d'un panier: sous-total, remise, taxe et livraison.

Fonctions pures (pas de Stripe, pas de DB). Tous les montants sont des entiers
en centimes; l'arrondi se fait au centime le plus proche, égalités vers le bas.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_DOWN
from typing import List, Optional, Sequence, Tuple

from .models import CartItem, Coupon, DiscountType

# Taux fixe de la juridiction (NY), non configurable
TAX_RATE = Decimal("0.08875")


@dataclass(frozen=True)
class ShippingTier:
    key: str
    display_name: str
    amount: int
    min_days: int
    max_days: int


STANDARD_SHIPPING = ShippingTier("standard", "Standard Shipping", 500, 5, 7)
EXPRESS_SHIPPING = ShippingTier("express", "Express Shipping", 1500, 2, 3)
SHIPPING_TIERS = (STANDARD_SHIPPING, EXPRESS_SHIPPING)


@dataclass(frozen=True)
class PricedCart:
    subtotal: int
    tax_amount: int = 0
    discount_amount: int = 0
    # Le tarif réellement choisi est connu de Stripe seulement (relu au webhook)
    shipping_cost: int = 0
    skip_shipping: bool = False
    skip_tax: bool = False

    @property
    def has_tax_line(self) -> bool:
        # Un coupon qui supprime la livraison supprime aussi la ligne de taxe
        return not self.skip_shipping and self.tax_amount > 0

    @property
    def has_discount_line(self) -> bool:
        return self.discount_amount > 0


def round_amount(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_DOWN))

def compute_subtotal(items: Sequence[CartItem]) -> int:
    return sum(item.price * item.quantity for item in items)

def compute_tax(subtotal: int, skip_tax: bool = False) -> int:
    if skip_tax or subtotal <= 0:
        return 0
    return round_amount(Decimal(subtotal) * TAX_RATE)

def compute_discount(coupon: Optional[Coupon], subtotal: int) -> Tuple[int, bool, bool]:
    """
    Applique le coupon au sous-total.
    Retour: (discount, skip_shipping, skip_tax). La remise est toujours dans [0, subtotal].
    Un pourcentage est arrondi comme la taxe (round_amount, égalités vers le bas):
    50 % de 999 donne 499.
    """
    if coupon is None:
        return 0, False, False

    discount = 0
    skip_shipping = False
    skip_tax = False
    value = Decimal(str(coupon.discount_value or 0))

    if coupon.discount_type == DiscountType.FIXED_AMOUNT:
        discount = round_amount(value)
    elif coupon.discount_type == DiscountType.PERCENTAGE:
        discount = round_amount(value / Decimal(100) * Decimal(subtotal))
    elif coupon.discount_type == DiscountType.FREE_SHIPPING:
        skip_shipping = True
    elif coupon.discount_type == DiscountType.NO_TAX:
        skip_tax = True
    elif coupon.discount_type == DiscountType.FULL_DISCOUNT:
        skip_shipping = True
        skip_tax = True

    discount = min(max(discount, 0), subtotal)
    return discount, skip_shipping, skip_tax

def price_cart(items: Sequence[CartItem], coupon: Optional[Coupon] = None) -> PricedCart:
    subtotal = compute_subtotal(items)
    discount, skip_shipping, skip_tax = compute_discount(coupon, subtotal)
    return PricedCart(
        subtotal=subtotal,
        tax_amount=compute_tax(subtotal, skip_tax),
        discount_amount=discount,
        skip_shipping=skip_shipping,
        skip_tax=skip_tax,
    )

def shipping_tiers(priced: PricedCart, preferred: Optional[str] = None) -> List[ShippingTier]:
    """
    Tarifs de livraison proposés à Stripe ([] si la livraison est offerte par coupon).
    Le tarif préféré est placé en premier pour être présélectionné par Stripe.
    """
    if priced.skip_shipping:
        return []
    tiers = list(SHIPPING_TIERS)
    key = (preferred or "").strip().lower()
    tiers.sort(key=lambda t: 0 if t.key == key else 1)
    return tiers
