from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from impact_backend.utils.security import require_admin
from . import service as settings_service

# module impact_backend.site_settings.views
router = APIRouter(prefix="/api/v1/admin/settings", tags=["Admin Settings"])


class SettingsUpdate(BaseModel):
    values: Dict[str, Optional[str]]
    category: Optional[str] = None


@router.get("")
def admin_list_settings(category: Optional[str] = None, user: Dict[str, Any] = Depends(require_admin)):
    return {"settings": settings_service.list_settings(category)}

@router.patch("")
def admin_save_settings(payload: SettingsUpdate, user: Dict[str, Any] = Depends(require_admin)):
    """Sauvegarde d'un onglet (category) ou de clés libres; seules les valeurs modifiées sont écrites."""
    return settings_service.save_settings(payload.values, payload.category)
