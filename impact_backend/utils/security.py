"""
Authentification du back-office.
L'identité de l'appelant est un contexte explicite injecté par Depends(...):
aucun état de session global n'est conservé côté serveur.
"""
from typing import Any, Dict, Optional
import logging
from fastapi import Request, HTTPException, Depends

import impact_backend.infra.supabase_client as supabase_client
from impact_backend import config

logger = logging.getLogger(__name__)

def determine_role(email: Optional[str], metadata: Dict[str, Any] | None) -> str:
    """admin si user_metadata.role == 'admin' ou email listé dans ADMIN_EMAILS."""
    if str((metadata or {}).get("role", "")).lower() == "admin":
        return "admin"
    if email and email.lower() in config.ADMIN_EMAILS:
        return "admin"
    return "user"

def get_user_from_token(access_token: str) -> Dict[str, Any]:
    """Normalise supabase.auth.get_user(access_token) en {id, email, metadata, role, token}."""
    res = supabase_client.get_supabase().auth.get_user(access_token)
    user = getattr(res, "user", None)
    if user is None:
        return {}
    if isinstance(user, dict):
        uid, email, metadata = user.get("id"), user.get("email"), user.get("user_metadata")
    else:
        uid, email, metadata = getattr(user, "id", None), getattr(user, "email", None), getattr(user, "user_metadata", None)
    metadata = metadata or {}
    return {
        "id": uid,
        "email": email,
        "metadata": metadata,
        "role": determine_role(email, metadata),
        "token": access_token,
    }

def get_current_user(request: Request) -> Dict[str, Any]:
    auth_header = request.headers.get("Authorization", "")
    token = auth_header[7:].strip() if auth_header.startswith("Bearer ") else ""
    if not token:
        raise HTTPException(status_code=401, detail="Non authentifié")

    try:
        user = get_user_from_token(token)
    except Exception:
        logger.warning("security.get_current_user token rejected")
        raise HTTPException(status_code=401, detail="Session expirée, veuillez vous connecter")
    if not user.get("id"):
        raise HTTPException(status_code=401, detail="Session expirée, veuillez vous connecter")
    # Identité validée: seule source de clé "user" pour le rate limiting
    request.state.user = user
    return user

def require_admin(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Accès interdit")
    return user
