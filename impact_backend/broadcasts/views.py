from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from impact_backend.utils.security import require_admin
from . import service as broadcasts_service

# module impact_backend.broadcasts.views
router = APIRouter(prefix="/api/v1/admin", tags=["Admin TV"])


class BroadcastCreate(BaseModel):
    title: str = ""
    description: Optional[str] = None
    stream_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    scheduled_at: Optional[str] = None
    is_live: bool = False


class BroadcastLiveUpdate(BaseModel):
    is_live: bool


class VideoCreate(BaseModel):
    title: str = ""
    video_url: str = ""
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration: Optional[str] = None
    category: Optional[str] = None


@router.get("/broadcasts")
def admin_list_broadcasts(user: Dict[str, Any] = Depends(require_admin)):
    return {"broadcasts": broadcasts_service.list_broadcasts()}

@router.post("/broadcasts", status_code=201)
def admin_create_broadcast(payload: BroadcastCreate, user: Dict[str, Any] = Depends(require_admin)):
    return {"broadcast": broadcasts_service.create_broadcast(payload.model_dump())}

@router.patch("/broadcasts/{broadcast_id}/live")
def admin_set_broadcast_live(broadcast_id: str, payload: BroadcastLiveUpdate, user: Dict[str, Any] = Depends(require_admin)):
    """Passage en direct (coupe les autres diffusions) ou arrêt du direct."""
    return {"broadcast": broadcasts_service.set_broadcast_live(broadcast_id, payload.is_live)}

@router.delete("/broadcasts/{broadcast_id}")
def admin_delete_broadcast(broadcast_id: str, user: Dict[str, Any] = Depends(require_admin)):
    broadcasts_service.delete_broadcast(broadcast_id)
    return {"deleted": broadcast_id}

@router.get("/videos")
def admin_list_videos(user: Dict[str, Any] = Depends(require_admin)):
    return {"videos": broadcasts_service.list_videos()}

@router.post("/videos", status_code=201)
def admin_create_video(payload: VideoCreate, user: Dict[str, Any] = Depends(require_admin)):
    return {"video": broadcasts_service.create_video(payload.model_dump())}

@router.delete("/videos/{video_id}")
def admin_delete_video(video_id: str, user: Dict[str, Any] = Depends(require_admin)):
    broadcasts_service.delete_video(video_id)
    return {"deleted": video_id}
