"""
Erreurs métier de l'API checkout.

Chaque erreur porte le code HTTP à renvoyer et un message montrable au client.
Le rendu JSON ({"message": ...}) est fait par app_setup.exception_handlers.
"""
from typing import Optional


class CheckoutAPIError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CheckoutAPIError):
    """Panier ou coupon mal formé (rejeté avant tout appel Stripe)."""
    status_code = 400
    default_message = "Invalid items data"


class SignatureError(CheckoutAPIError):
    """Signature Stripe absente/invalide ou payload webhook illisible."""
    status_code = 400
    default_message = "Webhook signature verification failed"


class GatewayError(CheckoutAPIError):
    """Échec d'un appel à Stripe; le message Stripe est repris quand il est sûr."""
    status_code = 500
    default_message = "An error occurred while creating the checkout session"


class PersistenceError(CheckoutAPIError):
    """
    Échec d'écriture Supabase.
    - duplicate=True pour une violation d'unicité (livraison webhook dupliquée).
    """
    status_code = 500
    default_message = "Error processing payment success"

    def __init__(self, message: Optional[str] = None, *, duplicate: bool = False):
        super().__init__(message)
        self.duplicate = duplicate
