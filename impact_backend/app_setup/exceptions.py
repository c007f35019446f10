"""
Gestionnaires d'exceptions utilisés par la factory.
- PaymentError (et sous-classes): JSON {"error": message} avec le code HTTP de l'erreur,
  contrat attendu par la vitrine (toast destructif avec le message).
- HTTPException: JSON FastAPI standard {"detail": ...} (auth admin, rate limit).
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from impact_backend.errors import PaymentError, ProviderError

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PaymentError)
    async def payment_error_handler(request: Request, exc: PaymentError):
        if exc.status_code >= 500:
            logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
        content = {"error": exc.message}
        if isinstance(exc, ProviderError) and exc.code:
            content["code"] = exc.code
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))
