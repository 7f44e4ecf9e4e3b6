import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from cologne_api import config
from cologne_api.app_setup.dependencies import get_gateway
from cologne_api.errors import CheckoutAPIError, GatewayError, ValidationError
from cologne_api.utils.rate_limit import optional_rate_limit
from cologne_api.checkout import service as checkout_service
from cologne_api.checkout.session_builder import resolve_base_url
from cologne_api.checkout.stripe_client import StripeGateway

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Checkout"])

_RL_TIMES, _RL_SECONDS = config.parse_rate_limit(config.CHECKOUT_RATE_LIMIT)

# module cologne_api.checkout.views
@router.post(
    "/create-checkout-session",
    dependencies=[Depends(optional_rate_limit(times=_RL_TIMES, seconds=_RL_SECONDS))],
)
async def create_checkout_session(request: Request, gateway: StripeGateway = Depends(get_gateway)):
    """
    Crée une session Checkout Stripe pour le panier envoyé par le frontend.
    - Entrée JSON: {items: [{id, name, description?, image_url?, price, quantity}], userId, email, shippingOption?, coupon?}
    - Sortie: {sessionId, url, orderId}
    - Erreurs: 400 si panier/coupon invalide (aucun appel Stripe), 500 si Stripe échoue
    """
    try:
        body: Dict[str, Any] = await request.json()
    except ValueError:
        raise ValidationError()
    if not isinstance(body, dict):
        raise ValidationError()

    base_url = resolve_base_url(config.FRONTEND_URL, request.headers.get("origin"), str(request.base_url))
    try:
        result = await run_in_threadpool(
            checkout_service.create_checkout_session,
            body,
            gateway=gateway,
            base_url=base_url,
            collect_tax_id=config.COLLECT_TAX_ID,
        )
    except CheckoutAPIError:
        raise
    except Exception as e:
        logger.exception("Error creating checkout session")
        raise GatewayError() from e
    return JSONResponse(result)

@router.get("/checkout-session/{session_id}")
def get_checkout_session(session_id: str, gateway: StripeGateway = Depends(get_gateway)):
    """
    Détails de la session/commande pour la page de succès.
    - Sortie: {customer{name,email}, items[], total, shipping, tax, subtotal, discount, orderId, ...}
    - Erreurs: 500 si la session est introuvable chez Stripe
    """
    try:
        return JSONResponse(checkout_service.get_session_details(session_id, gateway=gateway))
    except Exception as e:
        logger.exception("Error retrieving session session_id=%s", session_id)
        raise GatewayError("Failed to retrieve order details") from e
