"""
ASGI entrypoint: expose `app` pour les process managers / déploiements.

- En production, un process manager (ex: gunicorn/uvicorn-workers) importe `impact_backend.asgi:app`.
- Toute la configuration de FastAPI est centralisée dans impact_backend.app_setup,
  ce fichier ne fait qu'exposer l'instance `app`.
"""

from impact_backend.app import app

if __name__ == "__main__":
    import os
    import uvicorn
    uvicorn.run(
        "impact_backend.asgi:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
