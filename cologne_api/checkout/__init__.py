"""
Module 'checkout' (feature-first): point d'entrée public.
Réunit validation panier, calcul des prix, métadonnées Stripe, client Stripe, repository produits et services.
"""

from .cart import parse_items, parse_coupon
from .models import CartItem, Coupon, DiscountType
from .pricing import PricedCart, ShippingTier, TAX_RATE, price_cart, compute_tax, compute_discount, shipping_tiers
from .metadata import make_metadata, extract_metadata_from_session, parse_amount, genuine_line_items
from .session_builder import CheckoutSessionParams, build_session_params, build_line_items, resolve_base_url
from .stripe_client import StripeGateway, to_dict
from .repository import fetch_products_by_ids, get_products_map
from .service import create_checkout_session, get_session_details

__all__ = [
    # cart / models
    "parse_items",
    "parse_coupon",
    "CartItem",
    "Coupon",
    "DiscountType",
    # pricing
    "PricedCart",
    "ShippingTier",
    "TAX_RATE",
    "price_cart",
    "compute_tax",
    "compute_discount",
    "shipping_tiers",
    # metadata
    "make_metadata",
    "extract_metadata_from_session",
    "parse_amount",
    "genuine_line_items",
    # session
    "CheckoutSessionParams",
    "build_session_params",
    "build_line_items",
    "resolve_base_url",
    # stripe
    "StripeGateway",
    "to_dict",
    # repository
    "fetch_products_by_ids",
    "get_products_map",
    # services
    "create_checkout_session",
    "get_session_details",
]
