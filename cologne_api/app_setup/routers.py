"""
Registre central des routers.
- Checkout: /create-checkout-session, /checkout-session/{id}
- Orders: /webhook (Stripe)
- Health: /health, /health/supabase
"""
from fastapi import FastAPI
from cologne_api.checkout import views as checkout_views
from cologne_api.orders import views as orders_views
from cologne_api.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    app.include_router(checkout_views.router)
    app.include_router(orders_views.router)
    app.include_router(health_router)
