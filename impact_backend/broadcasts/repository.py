"""
Accès aux données Impact TV (tv_broadcasts, tv_videos).
"""
from typing import Any, Dict, List, Optional
import logging
import impact_backend.infra.supabase_client as supabase_client
from impact_backend.errors import PersistenceError

logger = logging.getLogger(__name__)

# module impact_backend.broadcasts.repository
def _list(table: str) -> List[dict]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(table)
            .select("*")
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        logger.exception("broadcasts.repository list failed table=%s", table)
        raise PersistenceError("Erreur lors de la lecture des diffusions") from e
    return res.data or []

def _insert(table: str, values: Dict[str, Any], message: str) -> Dict[str, Any]:
    try:
        res = supabase_client.get_service_supabase().table(table).insert(values).execute()
    except Exception as e:
        logger.exception("broadcasts.repository insert failed table=%s", table)
        raise PersistenceError(message) from e
    rows = res.data or []
    if not rows:
        raise PersistenceError(message)
    return rows[0]

def _delete(table: str, row_id: str, message: str) -> bool:
    """True si une ligne a été supprimée."""
    try:
        res = supabase_client.get_service_supabase().table(table).delete().eq("id", row_id).execute()
    except Exception as e:
        logger.exception("broadcasts.repository delete failed table=%s id=%s", table, row_id)
        raise PersistenceError(message) from e
    return bool(res.data)

def list_broadcasts() -> List[dict]:
    return _list("tv_broadcasts")

def insert_broadcast(values: Dict[str, Any]) -> Dict[str, Any]:
    return _insert("tv_broadcasts", values, "Impossible de créer la diffusion")

def delete_broadcast(broadcast_id: str) -> bool:
    return _delete("tv_broadcasts", broadcast_id, "Impossible de supprimer la diffusion")

def clear_live_except(broadcast_id: str) -> None:
    """is_live=false sur toutes les diffusions sauf broadcast_id."""
    try:
        (
            supabase_client.get_service_supabase()
            .table("tv_broadcasts")
            .update({"is_live": False})
            .neq("id", broadcast_id)
            .execute()
        )
    except Exception as e:
        logger.exception("broadcasts.repository.clear_live_except failed id=%s", broadcast_id)
        raise PersistenceError("Impossible de modifier le statut") from e

def set_live(broadcast_id: str, is_live: bool) -> Optional[Dict[str, Any]]:
    """Retourne la ligne modifiée ou None si la diffusion est inconnue."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("tv_broadcasts")
            .update({"is_live": is_live})
            .eq("id", broadcast_id)
            .execute()
        )
    except Exception as e:
        logger.exception("broadcasts.repository.set_live failed id=%s", broadcast_id)
        raise PersistenceError("Impossible de modifier le statut") from e
    rows = res.data or []
    return rows[0] if rows else None

def list_videos() -> List[dict]:
    return _list("tv_videos")

def insert_video(values: Dict[str, Any]) -> Dict[str, Any]:
    return _insert("tv_videos", values, "Impossible d'ajouter la vidéo")

def delete_video(video_id: str) -> bool:
    return _delete("tv_videos", video_id, "Impossible de supprimer la vidéo")
