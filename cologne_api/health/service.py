"""
Diagnostic Supabase pour le checkout.

Vérifie ce dont les routes ont réellement besoin:
  - lecture de 'products' avec le client anon (images des pages de succès)
  - lecture des tables écrites par le webhook avec le client d'écriture
    ('orders' en mode rpc, 'orders' + 'order_items' en mode tables)
Aucune procédure n'est appelée: process_stripe_webhook et update_coupon_usage écrivent.
"""
from typing import Any, Callable, Dict
import logging
import time

from cologne_api import config
import cologne_api.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

WRITE_TABLES = {
    "rpc": ("orders",),
    "tables": ("orders", "order_items"),
}

def _timed(check: Callable[[], int]) -> Dict[str, Any]:
    started = time.perf_counter()
    try:
        rows = check()
    except Exception as e:
        logger.warning("health.supabase check failed: %s", e)
        return {"ok": False, "error": str(e)}
    return {"ok": True, "rows": rows, "ms": round((time.perf_counter() - started) * 1000, 1)}

def _read_one(get_client: Callable[[], Any], table: str) -> Callable[[], int]:
    def check() -> int:
        res = get_client().table(table).select("id").limit(1).execute()
        return len(res.data or [])
    return check

def health_supabase_info() -> Dict[str, Any]:
    """
    Rapport {ok, configured, service_key, persistence, checks{<table>: {...}}}.
    ok est faux si la configuration manque ou si une vérification échoue.
    """
    report: Dict[str, Any] = {
        "ok": False,
        "configured": bool(config.SUPABASE_URL and config.SUPABASE_ANON),
        # Sans clé service, le webhook écrit avec le client anon (RLS)
        "service_key": bool(config.SUPABASE_SERVICE_KEY),
        "persistence": config.ORDER_PERSISTENCE,
        "checks": {},
    }
    if not report["configured"]:
        report["error"] = "SUPABASE_URL / SUPABASE_ANON_KEY manquants"
        return report

    checks = report["checks"]
    checks["products"] = _timed(_read_one(supabase_client.get_supabase, "products"))
    for table in WRITE_TABLES.get(config.ORDER_PERSISTENCE, ("orders",)):
        checks[table] = _timed(_read_one(supabase_client.get_service_supabase, table))
    report["ok"] = all(c["ok"] for c in checks.values())
    return report
