"""
Point d'entrée principal de l'API.

Usage:
    python -m cologne_api

Ce mode lance uvicorn directement et lit quelques variables d'environnement:
- PORT: port d'écoute (par défaut 10000)
- UVICORN_RELOAD: active le reload auto en dev ("1"/"true"/"yes")
- LOG_LEVEL: niveau de logs uvicorn (ex: "info", "debug")
"""
import os
import uvicorn

from cologne_api.config import PORT, LOG_LEVEL

if __name__ == "__main__":
    # Activer le reload uniquement si explicitement demandé (ex: en local)
    reload_flag = os.environ.get("UVICORN_RELOAD", "").lower() in ("1", "true", "yes")
    uvicorn.run(
        "cologne_api.asgi:app",
        host="0.0.0.0",
        port=PORT,
        reload=reload_flag,
        log_level=LOG_LEVEL,
    )
