from typing import Optional
from supabase import create_client, Client
from impact_backend.config import SUPABASE_URL, SUPABASE_ANON, SUPABASE_SERVICE_KEY
from impact_backend.errors import ConfigurationError

_supabase: Optional[Client] = None
_service_supabase: Optional[Client] = None

def get_supabase() -> Client:
    """
    Client Supabase 'anon': utilisé uniquement pour valider les tokens admin (auth.get_user).
    """
    global _supabase
    if _supabase is None:
        if not SUPABASE_URL or not SUPABASE_ANON:
            raise ConfigurationError("SUPABASE_URL/SUPABASE_ANON_KEY manquants")
        _supabase = create_client(SUPABASE_URL, SUPABASE_ANON)
    return _supabase

def get_service_supabase() -> Client:
    """
    Client service-role (bypass RLS): seul chemin d'écriture des paiements et commandes.
    """
    global _service_supabase
    if _service_supabase is None:
        if not SUPABASE_URL or not SUPABASE_SERVICE_KEY:
            raise ConfigurationError("SUPABASE_URL/SUPABASE_SERVICE_ROLE_KEY manquants")
        _service_supabase = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
    return _service_supabase
