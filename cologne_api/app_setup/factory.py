"""
Factory d'application pour les entrypoints (cologne_api.app, cologne_api.asgi).
Ordonne les étapes d'initialisation de manière lisible et testable.
"""
from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import register_cors_middleware, register_no_cache_middleware
from .exception_handlers import register_exception_handlers
from .routes import register_routes
from .routers import register_routers

def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - no-cache puis CORS (ajouté en dernier pour envelopper toute la pile, preflight compris)
      - gestionnaires d'exceptions et route racine
      - tous les routers (checkout, webhook, health)
    """
    app = FastAPI(title="Cologne Ologist API", lifespan=lifespan)
    register_no_cache_middleware(app)
    register_cors_middleware(app)
    register_exception_handlers(app)
    register_routes(app)
    register_routers(app)
    return app
