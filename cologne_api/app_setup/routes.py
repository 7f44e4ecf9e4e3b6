"""
Routes simples (hors routers): bannière de service et favicon.
"""
from fastapi import FastAPI
from fastapi.responses import Response
from starlette.status import HTTP_204_NO_CONTENT

SERVICE_NAME = "Cologne Ologist API"
ENDPOINTS = ["/create-checkout-session", "/checkout-session/:sessionId", "/webhook"]

def register_routes(app: FastAPI) -> None:
    @app.get("/", include_in_schema=False)
    def root():
        return {"message": SERVICE_NAME, "status": "running", "endpoints": ENDPOINTS}

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        return Response(status_code=HTTP_204_NO_CONTENT)
