import re
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from cologne_api import config

"""
Middlewares transverses de l'application.
- register_cors_middleware: origine frontend (+ motifs wildcard de preview), GET/POST/OPTIONS, credentials, preflight 24h.
- register_no_cache_middleware: empêche la mise en cache des détails de commande (/checkout-session/*).
"""

PREFLIGHT_MAX_AGE = 86400

def allowed_origins(frontend_url: str = "", extra: Optional[List[str]] = None) -> List[str]:
    """Origine frontend sans slash final + origines supplémentaires, sans doublons."""
    origins: List[str] = []
    for origin in [frontend_url, *(extra or [])]:
        origin = (origin or "").rstrip("/")
        if origin and origin not in origins:
            origins.append(origin)
    return origins

def origin_regex(patterns: List[str]) -> Optional[str]:
    """
    Convertit des motifs wildcard ("https://*.vercel.app") en une regex d'origine.
    '*' couvre un seul label DNS (lettres, chiffres, tirets).
    """
    parts = [re.escape(p.rstrip("/")).replace(r"\*", "[a-zA-Z0-9-]+") for p in patterns if p]
    if not parts:
        return None
    return "^(?:" + "|".join(parts) + ")$"

def register_cors_middleware(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins(config.FRONTEND_URL, config.CORS_ORIGINS),
        allow_origin_regex=origin_regex(config.CORS_ORIGIN_PATTERNS),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=PREFLIGHT_MAX_AGE,
    )

def register_no_cache_middleware(app: FastAPI) -> None:
    """
    Empêche la mise en cache des détails de session (données client).
    - S'applique aux GET sur /checkout-session/*.
    """
    @app.middleware("http")
    async def no_cache_for_order_details(request: Request, call_next):
        response = await call_next(request)
        if request.method == "GET" and request.url.path.startswith("/checkout-session/"):
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
            response.headers["Pragma"] = "no-cache"
            response.headers["Expires"] = "0"
        return response
