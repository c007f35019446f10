"""
Accès aux données pour la feature 'payments' (table 'payments').
Toutes les écritures passent par le client service-role: l'adaptateur est
le seul propriétaire du chemin d'écriture de status/payment_method/cinetpay_data.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging
import impact_backend.infra.supabase_client as supabase_client
from impact_backend.errors import PersistenceError
from .models import PaymentRecord, PaymentStatus

logger = logging.getLogger(__name__)

TABLE = "payments"
SNAPSHOT_COLUMNS = "status, payment_method, amount, currency"

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

# module impact_backend.payments.repository
def insert_payment(record: PaymentRecord) -> Dict[str, Any]:
    """
    Insère l'enregistrement initial (status 'pending').
    - Unique écriture durable du chemin d'initialisation.
    - Lève PersistenceError si Supabase rejette l'insert.
    """
    row = record.to_row()
    try:
        res = supabase_client.get_service_supabase().table(TABLE).insert(row).execute()
    except Exception as e:
        logger.exception("payments.repository.insert_payment failed transaction_id=%s", record.transaction_id)
        raise PersistenceError("Erreur lors de la sauvegarde du paiement") from e
    rows = res.data or []
    return rows[0] if isinstance(rows, list) and rows else row

def get_payment(transaction_id: str) -> Optional[Dict[str, Any]]:
    """Ligne complète ou None si la transaction est inconnue."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("*")
            .eq("transaction_id", transaction_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("payments.repository.get_payment failed transaction_id=%s", transaction_id)
        raise PersistenceError("Erreur lors de la lecture du paiement") from e
    rows = res.data or []
    return rows[0] if rows else None

def get_payment_snapshot(transaction_id: str) -> Optional[Dict[str, Any]]:
    """
    Lecture seule pour le polling: {status, payment_method, amount, currency} ou None.
    """
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select(SNAPSHOT_COLUMNS)
            .eq("transaction_id", transaction_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("payments.repository.get_payment_snapshot failed transaction_id=%s", transaction_id)
        raise PersistenceError("Erreur lors de la lecture du paiement") from e
    rows = res.data or []
    return rows[0] if rows else None

def update_payment_verification(
    transaction_id: str,
    status: str,
    payment_method: Optional[str],
    provider_data: Optional[Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """
    Écrit le résultat d'une vérification provider.
    - Garde status = 'pending' (compare-and-set): une ligne terminale n'est jamais réécrite.
    - Retourne les lignes modifiées ([] si aucune ligne pending ne correspond).
    """
    values = {
        "status": status,
        "payment_method": payment_method,
        "cinetpay_data": provider_data,
        "updated_at": _now_iso(),
    }
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .update(values)
            .eq("transaction_id", transaction_id)
            .eq("status", PaymentStatus.PENDING.value)
            .execute()
        )
    except Exception as e:
        logger.exception("payments.repository.update_payment_verification failed transaction_id=%s", transaction_id)
        raise PersistenceError("Erreur lors de la mise à jour du paiement") from e
    return res.data or []

def list_payments(limit: int = 100, status: Optional[str] = None) -> List[Dict[str, Any]]:
    """Paiements pour l'admin, du plus récent au plus ancien."""
    try:
        query = supabase_client.get_service_supabase().table(TABLE).select("*")
        if status:
            query = query.eq("status", status)
        res = query.order("created_at", desc=True).limit(limit).execute()
    except Exception as e:
        logger.exception("payments.repository.list_payments failed")
        raise PersistenceError("Erreur lors de la lecture des paiements") from e
    return res.data or []
