"""
Gestionnaires d'exceptions.
- Erreurs métier (CheckoutAPIError et dérivées): {"message": ...} avec le code porté par l'erreur.
- HTTPException (ex: 429 du rate limiter): body JSON FastAPI standard {"detail": ...}.
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from cologne_api.errors import CheckoutAPIError

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CheckoutAPIError)
    async def checkout_api_error(request: Request, exc: CheckoutAPIError):
        if exc.status_code >= 500:
            logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))
