"""
Accès aux données produits pour la feature 'checkout'.
"""
from typing import Any, Dict, Iterable, List
import logging
import cologne_api.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

# module cologne_api.checkout.repository
def fetch_products_by_ids(ids: List[str]) -> List[dict]:
    """
    Récupère (id, image_url) des produits par leurs IDs (table 'products').
    - Retourne [] si ids vide ou en cas d'erreur (l'image est alors relue depuis Stripe).
    """
    if not ids:
        return []
    try:
        res = (
            supabase_client.get_supabase()
            .table("products")
            .select("id, image_url")
            .in_("id", [str(i) for i in ids])
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("checkout.repository.fetch_products_by_ids failed ids=%s", ids)
        return []

def get_products_map(ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
    """Retourne un dict {id: produit} à partir d'une liste d'IDs."""
    products = fetch_products_by_ids([i for i in ids if i])
    return {str(p.get("id")): p for p in products}
