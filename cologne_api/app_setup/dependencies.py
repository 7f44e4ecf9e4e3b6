"""
Dépendances FastAPI: accès aux handles longue durée créés par le lifespan.
Les tests remplacent ces dépendances via app.dependency_overrides.
"""
from fastapi import Request

from cologne_api.checkout.stripe_client import StripeGateway
from cologne_api.orders.repository import OrderRepository

def get_gateway(request: Request) -> StripeGateway:
    return request.app.state.gateway

def get_order_repository(request: Request) -> OrderRepository:
    return request.app.state.order_repository
