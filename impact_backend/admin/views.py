from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from impact_backend.errors import NotFoundError, ValidationError
from impact_backend.utils.security import require_admin
from impact_backend.orders import repository as orders_repository
from impact_backend.orders import service as orders_service
from impact_backend.payments import repository as payments_repository
from impact_backend.payments import service as payments_service
from impact_backend.payments.models import PaymentStatus

# module impact_backend.admin.views
router = APIRouter(prefix="/api/v1/admin", tags=["Admin API"])


class OrderStatusUpdate(BaseModel):
    status: str


@router.get("/orders")
def admin_list_orders(limit: int = Query(default=100, ge=1, le=500), user: Dict[str, Any] = Depends(require_admin)):
    return {"orders": orders_repository.fetch_orders(limit)}

@router.get("/orders/{order_id}/items")
def admin_order_items(order_id: str, user: Dict[str, Any] = Depends(require_admin)):
    return {"items": orders_repository.fetch_order_items(order_id)}

@router.patch("/orders/{order_id}")
def admin_update_order(order_id: str, payload: OrderStatusUpdate, user: Dict[str, Any] = Depends(require_admin)):
    """Changement manuel du statut d'une commande (404 si inconnue, 400 si statut hors liste)."""
    return {"order": orders_service.change_order_status(order_id, payload.status)}

@router.get("/payments")
def admin_list_payments(
    status: Optional[str] = None,
    limit: int = Query(default=100, ge=1, le=500),
    user: Dict[str, Any] = Depends(require_admin),
):
    if status and status not in {s.value for s in PaymentStatus}:
        raise ValidationError(f"Statut invalide: {status}")
    return {"payments": payments_repository.list_payments(limit, status=status)}

@router.post("/payments/{transaction_id}/verify")
async def admin_verify_payment(transaction_id: str, user: Dict[str, Any] = Depends(require_admin)):
    """
    Réconciliation manuelle: re-vérifie la transaction auprès de CinetPay
    (utile si le webhook n'est jamais arrivé). Mêmes règles que le webhook,
    mais les erreurs provider/persistance remontent à l'admin.
    """
    result = await run_in_threadpool(payments_service.verify_payment, transaction_id)
    if result["outcome"] == "unknown":
        raise NotFoundError("Paiement introuvable")
    return result

@router.get("/dashboard")
def admin_dashboard(user: Dict[str, Any] = Depends(require_admin)):
    """Commandes totales, chiffre d'affaires (hors annulées), en attente, livrées et top produits."""
    return orders_service.dashboard_stats()
