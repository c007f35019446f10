import json
import logging
import urllib.parse
from typing import Any, Dict, Optional

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from impact_backend.errors import BadRequestError, PaymentError
from impact_backend.utils.rate_limit import optional_rate_limit
from impact_backend.payments import service as payments_service

logger = logging.getLogger(__name__)

# Sans préfixe: monté sur /payment et sur l'alias historique /functions/v1/cinetpay-payment
router = APIRouter(tags=["Payment API"])

_init_rate_limit = optional_rate_limit(times=10, seconds=60)

# module impact_backend.payments.views
async def _read_body(request: Request) -> Optional[Dict[str, Any]]:
    """
    Lit un body JSON ou application/x-www-form-urlencoded (CinetPay poste en form).
    Retourne None si le body est vide ou illisible.
    """
    raw = await request.body()
    if not raw:
        return None
    ctype = request.headers.get("content-type", "")
    if ctype.startswith("application/x-www-form-urlencoded"):
        parsed = urllib.parse.parse_qs(raw.decode("utf-8", errors="replace"))
        return {k: v[0] for k, v in parsed.items() if v}
    try:
        body = json.loads(raw)
    except ValueError:
        return None
    return body if isinstance(body, dict) else None

@router.post("")
async def payment_post(request: Request, action: Optional[str] = None):
    """
    Point d'entrée POST:
    - action=notify: webhook CinetPay -> {"success": true} (400 si transaction ID absent)
    - action=status: même lecture que le GET (transaction_id en query)
    - sinon (ou action=initialize): initialisation -> {payment_url, transaction_id}
    Erreurs métier rendues en {"error": ...} par le handler PaymentError.
    """
    if action == "notify":
        body = await _read_body(request)
        logger.info("payments.notify received payload=%s", body)
        return JSONResponse(await run_in_threadpool(payments_service.handle_notification, body))
    if action == "status":
        return await _status_response(request.query_params.get("transaction_id"))

    await _init_rate_limit(request, Response())
    body = await _read_body(request) or {}
    try:
        result = await run_in_threadpool(payments_service.initialize_payment, body, request.headers.get("origin"))
    except PaymentError:
        raise
    except Exception as e:
        logger.exception("Erreur payment_post initialize")
        return JSONResponse(status_code=500, content={"error": str(e) or "Erreur inconnue"})
    return JSONResponse(result.model_dump())

@router.get("")
async def payment_get(action: Optional[str] = None, transaction_id: Optional[str] = None):
    """
    GET ?action=status&transaction_id=<id> -> {"data": {status, payment_method, amount, currency} | null}
    Lecture pure, aucun effet de bord. Toute autre action -> 405.
    """
    if action != "status":
        return JSONResponse(status_code=405, content={"error": "Method not allowed"})
    return await _status_response(transaction_id)

async def _status_response(transaction_id: Optional[str]) -> JSONResponse:
    if not (transaction_id or "").strip():
        raise BadRequestError("Missing transaction_id")
    snapshot = await run_in_threadpool(payments_service.get_payment_status, transaction_id.strip())
    return JSONResponse({"data": snapshot.model_dump() if snapshot else None})
