"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.

Une instance StripeGateway est créée au démarrage (lifespan) et injectée dans
les handlers; la clé est passée à chaque appel plutôt que via stripe.api_key.
"""
import logging
from typing import Any, Dict, Iterable, Optional

import stripe

from cologne_api.errors import GatewayError, SignatureError

logger = logging.getLogger(__name__)

# module cologne_api.checkout.stripe_client
def to_dict(obj: Any) -> Dict[str, Any]:
    """
    Convertit un objet Stripe (StripeObject) en dict Python récursif.
    Les dicts sont renvoyés tels quels (fakes de tests).
    """
    if obj is None:
        return {}
    if isinstance(obj, dict):
        return obj
    for attr in ("to_dict_recursive", "to_dict"):
        fn = getattr(obj, attr, None)
        if callable(fn):
            return fn()
    return dict(obj)


class StripeGateway:
    def __init__(self, secret_key: str, webhook_secret: str = ""):
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret

    def require_stripe(self) -> None:
        """Sans clé, aucun appel Stripe n'est tenté."""
        if not self.secret_key:
            raise GatewayError("STRIPE_SECRET_KEY is not configured")

    def create_session(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Crée une session Stripe Checkout.
        - params: kwargs de checkout.Session.create (line_items, metadata, urls, ...)
        Retour: dict session (ex: {"id": "cs_test_...", "url": "https://..."})
        """
        self.require_stripe()
        try:
            session = stripe.checkout.Session.create(api_key=self.secret_key, **params)
        except stripe.StripeError as e:
            logger.error("stripe.create_session failed order_id=%s error=%s", (params.get("metadata") or {}).get("orderId"), e)
            raise GatewayError(e.user_message or None) from e
        return to_dict(session)

    def get_session(self, session_id: str, expand: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """
        Récupère une session Stripe Checkout par son identifiant.
        - expand: sous-ressources à développer (ex: "line_items.data.price.product")
        """
        self.require_stripe()
        try:
            session = stripe.checkout.Session.retrieve(session_id, expand=list(expand or []), api_key=self.secret_key)
        except stripe.StripeError as e:
            logger.error("stripe.get_session failed session_id=%s error=%s", session_id, e)
            raise GatewayError(e.user_message or "Failed to retrieve checkout session") from e
        return to_dict(session)

    def parse_event(self, payload: bytes, sig_header: Optional[str]) -> Dict[str, Any]:
        """
        Valide la signature d'un événement webhook et le décode.
        - payload: octets bruts du corps de la requête (non re-sérialisés)
        - sig_header: en-tête Stripe-Signature
        Soulève SignatureError si le secret/l'en-tête manque ou si la vérification échoue.
        """
        if not self.webhook_secret:
            raise SignatureError("Webhook secret is not configured")
        if not sig_header:
            raise SignatureError("Missing Stripe-Signature header")
        try:
            event = stripe.Webhook.construct_event(payload, sig_header, self.webhook_secret)
        except stripe.SignatureVerificationError as e:
            raise SignatureError(f"Webhook Error: {e}") from e
        except ValueError as e:
            raise SignatureError(f"Webhook Error: invalid payload ({e})") from e
        return to_dict(event)
