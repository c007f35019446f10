"""
Cas d'usage 'site_settings': lecture et sauvegarde des paramètres du site
(infos générales, coordonnées, réseaux sociaux).
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

from impact_backend.errors import PersistenceError, ValidationError
from . import repository

logger = logging.getLogger(__name__)

# module impact_backend.site_settings.service
def list_settings(category: Optional[str] = None) -> List[dict]:
    return repository.fetch_settings(category)

def save_settings(values: Mapping[str, Any], category: Optional[str] = None) -> Dict[str, Any]:
    """
    Sauvegarde {key: value}:
    - clé inconnue (ou hors catégorie) -> ValidationError, rien n'est écrit
    - seules les valeurs modifiées sont écrites (None compte comme "")
    - si une écriture échoue, les autres sont tentées puis PersistenceError est levée
    Retour: {"updated": [clés modifiées]}
    """
    current = {s.get("key"): (s.get("value") or "") for s in repository.fetch_settings(category)}
    unknown = sorted(k for k in values if k not in current)
    if unknown:
        raise ValidationError(f"Paramètre inconnu: {', '.join(unknown)}")

    updated: List[str] = []
    failed: List[str] = []
    for key, raw in values.items():
        value = "" if raw is None else str(raw)
        if value == current[key]:
            continue
        try:
            repository.update_setting_value(key, value)
        except PersistenceError:
            failed.append(key)
            continue
        updated.append(key)

    if failed:
        logger.warning("site_settings.save partial failure failed=%s updated=%s", failed, updated)
        raise PersistenceError("Certains paramètres n'ont pas pu être sauvegardés")
    logger.info("site_settings.save updated=%s", updated)
    return {"updated": updated}
