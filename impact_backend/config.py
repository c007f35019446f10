# impact_backend.config
from pathlib import Path
import os
from typing import List
from dotenv import load_dotenv
from impact_backend.errors import ConfigurationError

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH)

"""
Configuration centrale du backend.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, CinetPay), CORS/hosts
- Fournit les URLs publiques utilisées pour les callbacks de paiement
- require_config(): contrôle fail-fast des clés obligatoires au démarrage
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _clean_url(v: str) -> str:
    url = _clean_env(v)
    if url and not url.startswith("http"):
        url = "https://" + url
    return url.rstrip("/")

def _float_env(name: str, default: float) -> float:
    try:
        value = float(_clean_env(os.getenv(name)) or default)
    except ValueError:
        return default
    # Le timeout sortant doit rester borné
    if value <= 0 or value != value or value == float("inf"):
        return default
    return value

# Supabase: URL et clés (service pour les écritures, anon pour vérifier les tokens admin)
SUPABASE_URL = _clean_url(os.getenv("SUPABASE_URL") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_SERVICE_KEY") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or "")

# CinetPay: identifiants marchand et API
CINETPAY_API_KEY = _clean_env(os.getenv("CINETPAY_API_KEY") or "")
CINETPAY_SITE_ID = _clean_env(os.getenv("CINETPAY_SITE_ID") or "")
CINETPAY_BASE_URL = _clean_url(os.getenv("CINETPAY_BASE_URL") or "https://client.cinetpay.com/v1")
CINETPAY_TIMEOUT = _float_env("CINETPAY_TIMEOUT", 15.0)

# Paiements
PAYMENT_CURRENCY = _clean_env(os.getenv("PAYMENT_CURRENCY") or "XOF")
PAYMENT_DEFAULT_DESCRIPTION = _clean_env(os.getenv("PAYMENT_DEFAULT_DESCRIPTION") or "Paiement Impact Digital")
PAYMENT_MIN_AMOUNT = 100
PAYMENT_MAX_AMOUNT = 1_500_000

# URLs publiques: BASE_URL = ce service (notify), PUBLIC_SITE_URL = vitrine (return/cancel)
BASE_URL = _clean_url(os.getenv("BASE_URL") or "http://localhost:8000")
PUBLIC_SITE_URL = _clean_url(os.getenv("PUBLIC_SITE_URL") or "http://localhost:8080")

# Sécurité / admin
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
ADMIN_EMAILS = [e.strip().lower() for e in os.getenv("ADMIN_EMAILS", "").split(",") if e.strip()]

# CORS / hosts
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]
# Proxys autorisés à réécrire l'IP cliente via X-Forwarded-For (équivalent de --forwarded-allow-ips)
FORWARDED_ALLOW_IPS = [h.strip() for h in os.getenv("FORWARDED_ALLOW_IPS", "127.0.0.1").split(",") if h.strip()]

REQUIRED_KEYS = (
    "CINETPAY_API_KEY",
    "CINETPAY_SITE_ID",
    "SUPABASE_URL",
    "SUPABASE_SERVICE_KEY",
)

def missing_config() -> List[str]:
    """Liste des clés obligatoires absentes (lues sur le module, donc patchables en tests)."""
    import impact_backend.config as cfg
    return [key for key in REQUIRED_KEYS if not getattr(cfg, key, "")]

def require_config() -> None:
    """
    Contrôle fail-fast: lève ConfigurationError si une clé obligatoire manque.
    Appelé par le lifespan, l'application refuse alors de démarrer.
    """
    missing = missing_config()
    if missing:
        raise ConfigurationError(f"Configuration manquante: {', '.join(missing)}")
