from typing import Dict, Any
from fastapi import Request, Response, HTTPException
import os
import time

def _client_key(req: Request) -> str:
    """
    Clé de rate limiting, toujours suffixée par le chemin:
    - utilisateur dont le token a déjà été validé (request.state.user posé par get_current_user)
    - sinon IP de la connexion (réécrite par ProxyHeadersMiddleware pour les seuls proxys de confiance)
    Les en-têtes Authorization / X-Forwarded-For bruts ne sont jamais lus ici.
    """
    path = req.url.path
    user = getattr(req.state, "user", None)
    if isinstance(user, dict) and user.get("id"):
        return f"user:{user['id']}:{path}"
    ip = req.client.host if req.client else "local"
    return f"ip:{ip}:{path}"

def _purge_expired(store: Dict[str, list], now: float, seconds: int) -> None:
    for key in [k for k, hits in store.items() if not hits or now - hits[-1] >= seconds]:
        del store[key]

def optional_rate_limit(times: int, seconds: int):
    """
    Dépendance FastAPI de rate limiting.
    - LOCAL_RATE_LIMIT_FALLBACK=1: fenêtre glissante en mémoire (app.state, une table par fenêtre)
    - app.state.rate_limit_enabled False: aucune limite
    - sinon fastapi-limiter (Redis) si initialisé
    """
    async def _dep(request: Request, response: Response):
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            now = time.time()
            key = _client_key(request)
            stores = getattr(request.app.state, "_rl_store", None)
            if stores is None:
                stores = request.app.state._rl_store = {}
            store = stores.setdefault(seconds, {})
            _purge_expired(store, now, seconds)
            hits = [t for t in store.get(key, []) if now - t < seconds]
            if len(hits) >= times:
                raise HTTPException(status_code=429, detail="Too Many Requests")
            hits.append(now)
            store[key] = hits
            return

        if getattr(request.app.state, "rate_limit_enabled", None) is False:
            return

        try:
            from fastapi_limiter import FastAPILimiter
            from fastapi_limiter.depends import RateLimiter
        except ImportError:
            return
        if getattr(FastAPILimiter, "redis", None) is None:
            return

        async def _identifier(req: Request) -> str:
            return _client_key(req)
        return await RateLimiter(times=times, seconds=seconds, identifier=_identifier)(request, response)
    return _dep

def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    enabled = getattr(request.app.state, "rate_limit_enabled", None)

    limiter_ready = False
    backend = None
    try:
        from fastapi_limiter import FastAPILimiter
        limiter_ready = getattr(FastAPILimiter, "redis", None) is not None
        backend = "redis" if limiter_ready else None
    except ImportError:
        limiter_ready = False
        backend = None

    info: Dict[str, Any] = {
        "enabled": (bool(enabled) if enabled is not None else None),
        "ready": limiter_ready,
        "backend": backend,
    }

    if backend == "redis":
        from urllib.parse import urlparse
        redis_url = os.getenv("RATE_LIMIT_REDIS_URL")
        if redis_url:
            p = urlparse(redis_url)
            info["redis"] = {
                "scheme": p.scheme,
                "host": p.hostname,
                "port": p.port,
            }

    return info
