# cologne_api.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale de l'API checkout.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Stripe, Supabase)
- Expose l'origine frontend (redirections Checkout + CORS) et les motifs d'origines de preview
- Paramètres d'exécution: port, niveau de logs, mode de persistance des commandes
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _split_env(v: str) -> list:
    """Découpe une liste séparée par des virgules en ignorant les entrées vides."""
    return [x.strip() for x in _clean_env(v).split(",") if x.strip()]

def _flag(name: str, default: str = "false") -> bool:
    return _clean_env(os.getenv(name, default)).lower() in ("1", "true", "yes")

# Stripe: clé secrète API et secret de signature des webhooks
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")

# Supabase: URL et clés (anon / service)
# - les noms VITE_* sont acceptés car le .env est souvent partagé avec le frontend
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("VITE_SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(
    os.getenv("SUPABASE_ANON_KEY") or os.getenv("VITE_SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY") or ""
)
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Frontend: base des URLs de redirection Checkout et origine CORS principale
FRONTEND_URL = _clean_env(os.getenv("FRONTEND_URL") or "").rstrip("/")

# CORS: origines supplémentaires et motifs wildcard (déploiements de preview)
CORS_ORIGINS = _split_env(os.getenv("CORS_ORIGINS") or "")
CORS_ORIGIN_PATTERNS = _split_env(os.getenv("CORS_ORIGIN_PATTERNS") or "")

# Persistance des commandes: "rpc" (procédure process_stripe_webhook) ou "tables" (inserts directs)
ORDER_PERSISTENCE = (_clean_env(os.getenv("ORDER_PERSISTENCE") or "rpc")).lower()

# Checkout: collecte du numéro de TVA/tax id côté Stripe
COLLECT_TAX_ID = _flag("COLLECT_TAX_ID")

# Rate limit de création de session: "<times>/<seconds>"
CHECKOUT_RATE_LIMIT = _clean_env(os.getenv("CHECKOUT_RATE_LIMIT") or "10/60")

# Serveur
PORT = int(_clean_env(os.getenv("PORT") or "10000"))
LOG_LEVEL = _clean_env(os.getenv("LOG_LEVEL") or "info").lower()

def parse_rate_limit(value: str) -> tuple:
    """
    Parse "<times>/<seconds>" -> (times, seconds).
    Retourne (10, 60) si la valeur est invalide.
    """
    try:
        times, seconds = value.split("/", 1)
        return max(int(times), 1), max(int(seconds), 1)
    except (ValueError, AttributeError):
        return 10, 60
