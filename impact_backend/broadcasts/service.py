"""
Cas d'usage Impact TV (back-office): diffusions en direct et archive vidéo.

Une seule diffusion est en direct à la fois: passer une diffusion à
is_live=true remet toutes les autres à false.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

from impact_backend.errors import NotFoundError, ValidationError
from . import repository

logger = logging.getLogger(__name__)

BROADCAST_FIELDS = ("description", "stream_url", "thumbnail_url", "scheduled_at")
VIDEO_FIELDS = ("description", "thumbnail_url", "duration")

def _clean(value: Any) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None

# module impact_backend.broadcasts.service
def list_broadcasts() -> List[dict]:
    return repository.list_broadcasts()

def create_broadcast(body: Mapping[str, Any]) -> Dict[str, Any]:
    """Titre obligatoire. Une diffusion créée en direct coupe les autres."""
    title = _clean(body.get("title"))
    if not title:
        raise ValidationError("Le titre est requis")
    values: Dict[str, Any] = {"title": title, "is_live": bool(body.get("is_live"))}
    values.update({field: _clean(body.get(field)) for field in BROADCAST_FIELDS})

    row = repository.insert_broadcast(values)
    if row.get("is_live") and row.get("id"):
        repository.clear_live_except(row["id"])
    logger.info("broadcasts.create id=%s is_live=%s", row.get("id"), row.get("is_live"))
    return row

def set_broadcast_live(broadcast_id: str, is_live: bool) -> Dict[str, Any]:
    """
    Active/désactive le direct.
    La diffusion doit exister (NotFoundError sinon, et les autres ne sont pas touchées).
    """
    row = repository.set_live(broadcast_id, is_live)
    if row is None:
        raise NotFoundError("Diffusion introuvable")
    if is_live:
        repository.clear_live_except(broadcast_id)
    logger.info("broadcasts.set_live id=%s is_live=%s", broadcast_id, is_live)
    return row

def delete_broadcast(broadcast_id: str) -> None:
    if not repository.delete_broadcast(broadcast_id):
        raise NotFoundError("Diffusion introuvable")

def list_videos() -> List[dict]:
    return repository.list_videos()

def create_video(body: Mapping[str, Any]) -> Dict[str, Any]:
    title = _clean(body.get("title"))
    video_url = _clean(body.get("video_url"))
    if not title or not video_url:
        raise ValidationError("Le titre et l'URL sont requis")
    values: Dict[str, Any] = {
        "title": title,
        "video_url": video_url,
        "category": _clean(body.get("category")) or "general",
    }
    values.update({field: _clean(body.get(field)) for field in VIDEO_FIELDS})
    return repository.insert_video(values)

def delete_video(video_id: str) -> None:
    if not repository.delete_video(video_id):
        raise NotFoundError("Vidéo introuvable")
