import logging
from typing import Optional
from supabase import create_client, Client
from cologne_api.config import SUPABASE_URL, SUPABASE_ANON, SUPABASE_SERVICE_KEY

logger = logging.getLogger(__name__)

_supabase: Optional[Client] = None
_service_supabase: Optional[Client] = None

def get_supabase() -> Client:
    """Client 'anon' partagé (lectures publiques: products)."""
    global _supabase
    if _supabase is None:
        if not SUPABASE_URL or not SUPABASE_ANON:
            raise RuntimeError("SUPABASE_URL / SUPABASE_ANON_KEY manquants pour get_supabase()")
        _supabase = create_client(SUPABASE_URL, SUPABASE_ANON)
    return _supabase

def get_service_supabase() -> Client:
    """
    Client service-role partagé (écritures du webhook: orders, order_items, coupons).
    Sans SUPABASE_SERVICE_KEY, retombe sur le client anon (les policies RLS doivent alors autoriser l'insert).
    """
    global _service_supabase
    if not SUPABASE_SERVICE_KEY:
        logger.debug("SUPABASE_SERVICE_KEY absent: écritures via le client anon")
        return get_supabase()
    if _service_supabase is None:
        _service_supabase = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
    return _service_supabase
