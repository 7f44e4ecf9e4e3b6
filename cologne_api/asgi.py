"""
ASGI entrypoint: expose `app` for process managers / deployments.

- En production, un process manager (ex: gunicorn/uvicorn-workers) importe `cologne_api.asgi:app`.
- Toute la configuration FastAPI est centralisée dans cologne_api.app_setup.factory.
"""

from cologne_api.app import app

if __name__ == "__main__":
    import uvicorn
    from cologne_api.config import PORT

    uvicorn.run(
        "cologne_api.asgi:app",
        host="0.0.0.0",  # écoute toutes interfaces (Docker/VM)
        port=PORT,
        reload=True,     # rechargement automatique en dev
    )
