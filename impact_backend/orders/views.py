"""Endpoints boutique.
- /api/v1/shop/checkout: crée la commande puis initialise le paiement CinetPay.
Sécurité:
- pas de compte client (achat invité), rate limit sur la création de commandes.
"""
import logging

from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from impact_backend.errors import PaymentError, ValidationError
from impact_backend.utils.rate_limit import optional_rate_limit
from impact_backend.orders import service as orders_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/shop", tags=["Shop API"])


@router.post("/checkout", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def shop_checkout(request: Request):
    """Checkout invité.
    - Entrée JSON: {items: [{id, quantity}], customer_name, customer_phone,
      customer_email?, shipping_address?, notes?}
    - Retour: {order_id, order_number, payment_url, transaction_id}
    - Erreurs: {"error": ...} 400 (validation), 500 (persistance), 502/504 (CinetPay)
    """
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("JSON invalide")
    if not isinstance(body, dict):
        raise ValidationError("JSON invalide")

    try:
        result = await run_in_threadpool(orders_service.checkout, body, request.headers.get("origin"))
    except PaymentError:
        raise
    except Exception as e:
        logger.exception("Erreur shop_checkout")
        return JSONResponse(status_code=500, content={"error": str(e) or "Impossible de finaliser la commande."})
    return JSONResponse(result)
