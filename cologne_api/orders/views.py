import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from cologne_api.app_setup.dependencies import get_gateway, get_order_repository
from cologne_api.checkout.stripe_client import StripeGateway
from cologne_api.errors import CheckoutAPIError, SignatureError
from cologne_api.orders import reconciler
from cologne_api.orders.repository import OrderRepository

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Stripe webhook"])

# module cologne_api.orders.views
@router.post("/webhook", include_in_schema=False)
async def stripe_webhook(
    request: Request,
    gateway: StripeGateway = Depends(get_gateway),
    repository: OrderRepository = Depends(get_order_repository),
):
    """
    Webhook Stripe: consomme checkout.session.completed pour créer la commande.
    - Signature: vérifiée sur les octets bruts (Stripe-Signature + STRIPE_WEBHOOK_SECRET) avant toute lecture
    - Réponse: {"received": true} pour tout type d'événement
    - Erreurs: 400 si signature/payload invalide, 500 si le traitement échoue (Stripe relivre)
    """
    payload = await request.body()
    try:
        event = gateway.parse_event(payload, request.headers.get("stripe-signature"))
    except SignatureError as e:
        logger.warning("Webhook signature verification failed: %s", e.message)
        raise

    try:
        result = await run_in_threadpool(reconciler.handle_event, event, gateway=gateway, repository=repository)
    except Exception as e:
        session_id = (((event.get("data") or {}).get("object")) or {}).get("id")
        logger.exception("Error processing successful payment event_id=%s session_id=%s", event.get("id"), session_id)
        raise CheckoutAPIError("Error processing payment success") from e
    return JSONResponse(result)
