"""
Accès à la table site_settings (clé/valeur éditables depuis le back-office).
"""
from datetime import datetime, timezone
from typing import List, Optional
import logging
import impact_backend.infra.supabase_client as supabase_client
from impact_backend.errors import PersistenceError

logger = logging.getLogger(__name__)

# module impact_backend.site_settings.repository
def fetch_settings(category: Optional[str] = None) -> List[dict]:
    """Paramètres triés par sort_order, éventuellement filtrés par catégorie."""
    try:
        query = supabase_client.get_service_supabase().table("site_settings").select("*")
        if category:
            query = query.eq("category", category)
        res = query.order("sort_order").execute()
    except Exception as e:
        logger.exception("site_settings.repository.fetch_settings failed category=%s", category)
        raise PersistenceError("Impossible de charger les paramètres") from e
    return res.data or []

def update_setting_value(key: str, value: str) -> None:
    try:
        (
            supabase_client.get_service_supabase()
            .table("site_settings")
            .update({"value": value, "updated_at": datetime.now(timezone.utc).isoformat()})
            .eq("key", key)
            .execute()
        )
    except Exception as e:
        logger.exception("site_settings.repository.update_setting_value failed key=%s", key)
        raise PersistenceError(f"Impossible de sauvegarder le paramètre {key}") from e
