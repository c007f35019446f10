"""
Cas d'usage 'payments': orchestre validation, repository et client CinetPay.

Cycle de vie d'une transaction:
  initialize_payment -> redirection navigateur vers CinetPay
  -> webhook notify (handle_notification) -> re-vérification provider (verify_payment)
  -> polling du front (get_payment_status)
Seule une vérification auprès de CinetPay fait sortir un paiement de 'pending'.
"""
import logging
import math
import secrets
import string
import time
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode

from impact_backend import config
from impact_backend.errors import BadRequestError, ValidationError
from . import cinetpay_client
from . import repository
from .models import (
    PaymentInitResult,
    PaymentRecord,
    PaymentRequest,
    PaymentSnapshot,
    PaymentStatus,
    TERMINAL_STATUSES,
)

logger = logging.getLogger(__name__)

PAYMENT_PATH = "/payment"
RETURN_PATH = "/paiement"
MISSING_FIELDS_MESSAGE = "Champs obligatoires manquants: amount, customer_name, customer_phone"
AMOUNT_RANGE_MESSAGE = "Le montant doit être entre 100 et 1 500 000 FCFA"

_ID_ALPHABET = string.digits + string.ascii_lowercase

# module impact_backend.payments.service
def generate_transaction_id() -> str:
    """PAY-<epoch ms>-<6 caractères base36 aléatoires>."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(6))
    return f"PAY-{int(time.time() * 1000)}-{suffix}"

def _clean_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()

def _parse_amount(value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError("Montant invalide")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Montant invalide")
    if not math.isfinite(amount):
        raise ValidationError("Montant invalide")
    return amount

def round_amount(amount: float) -> int:
    """Arrondi au FCFA le plus proche, demi vers le haut (250.5 -> 251)."""
    return int(math.floor(amount + 0.5))

def validate_payment_request(body: Mapping[str, Any]) -> PaymentRequest:
    """
    Valide le payload d'initialisation.
    - amount, customer_name, customer_phone obligatoires et non vides
    - 100 <= amount <= 1 500 000 (unités entières de FCFA, arrondi au plus proche)
    Lève ValidationError (400) sans effet de bord.
    """
    if not isinstance(body, Mapping):
        raise ValidationError(MISSING_FIELDS_MESSAGE)

    raw_amount = body.get("amount")
    name = _clean_str(body.get("customer_name"))
    phone = _clean_str(body.get("customer_phone"))
    if raw_amount in (None, "", 0) or not name or not phone:
        raise ValidationError(MISSING_FIELDS_MESSAGE)

    amount = _parse_amount(raw_amount)
    if amount < config.PAYMENT_MIN_AMOUNT or amount > config.PAYMENT_MAX_AMOUNT:
        raise ValidationError(AMOUNT_RANGE_MESSAGE)

    return PaymentRequest(
        amount=round_amount(amount),
        customer_name=name,
        customer_phone=phone,
        customer_email=_clean_str(body.get("customer_email")) or None,
        description=_clean_str(body.get("description")) or None,
    )

def _site_url(origin: Optional[str]) -> str:
    origin = _clean_str(origin).rstrip("/")
    if origin.startswith("http://") or origin.startswith("https://"):
        return origin
    return config.PUBLIC_SITE_URL

def build_callback_urls(transaction_id: str, origin: Optional[str] = None) -> Dict[str, str]:
    """
    URLs transmises à CinetPay:
    - notify_url: webhook serveur-à-serveur vers ce service
    - return_url: retour navigateur, porte transaction_id pour reprendre le polling
    - cancel_url: abandon côté CinetPay
    """
    site = _site_url(origin)
    return {
        "notify_url": f"{config.BASE_URL}{PAYMENT_PATH}?{urlencode({'action': 'notify'})}",
        "return_url": f"{site}{RETURN_PATH}?{urlencode({'status': 'done', 'transaction_id': transaction_id})}",
        "cancel_url": f"{site}{RETURN_PATH}?{urlencode({'status': 'cancelled'})}",
    }

def initialize_payment(body: Mapping[str, Any], origin: Optional[str] = None) -> PaymentInitResult:
    """
    Initialise un paiement:
      1) validation (aucune écriture si invalide)
      2) insert 'pending' (PersistenceError => pas d'URL de paiement)
      3) appel CinetPay; ProviderError si code != 201 (la ligne reste 'pending')
    Retour: {payment_url, transaction_id}
    """
    req = validate_payment_request(body)
    transaction_id = generate_transaction_id()

    record = PaymentRecord(
        transaction_id=transaction_id,
        amount=req.amount,
        currency=config.PAYMENT_CURRENCY,
        customer_name=req.customer_name,
        customer_phone=req.customer_phone,
        customer_email=req.customer_email,
        description=req.description,
    )
    repository.insert_payment(record)

    data = cinetpay_client.create_payment(
        transaction_id=transaction_id,
        amount=req.amount,
        currency=config.PAYMENT_CURRENCY,
        description=req.description or config.PAYMENT_DEFAULT_DESCRIPTION,
        customer_name=req.customer_name,
        customer_phone=req.customer_phone,
        customer_email=req.customer_email or "",
        **build_callback_urls(transaction_id, origin),
    )
    logger.info("payments.initialize transaction_id=%s amount=%s", transaction_id, req.amount)
    return PaymentInitResult(payment_url=data["payment_url"], transaction_id=transaction_id)

def extract_transaction_id(payload: Any) -> str:
    """Seul champ lu dans le payload du webhook (cpm_trans_id, ou transaction_id)."""
    if isinstance(payload, Mapping):
        tid = _clean_str(payload.get("cpm_trans_id") or payload.get("transaction_id"))
        if tid:
            return tid
    raise BadRequestError("Missing transaction ID")

def map_provider_status(provider_status: Any) -> PaymentStatus:
    """ACCEPTED -> completed, REFUSED -> failed, tout le reste -> pending (comparaison exacte, casse comprise)."""
    if provider_status == "ACCEPTED":
        return PaymentStatus.COMPLETED
    if provider_status == "REFUSED":
        return PaymentStatus.FAILED
    return PaymentStatus.PENDING

def _confirm_linked_order(transaction_id: str) -> None:
    # Import local: orders dépend de payments
    from impact_backend.orders import repository as orders_repository
    try:
        confirmed = orders_repository.confirm_order_for_payment(transaction_id)
        if confirmed:
            logger.info("payments.verify order confirmed transaction_id=%s", transaction_id)
    except Exception:
        logger.exception("payments.verify order confirmation failed transaction_id=%s", transaction_id)

def verify_payment(transaction_id: str) -> Dict[str, Any]:
    """
    Re-vérifie la transaction auprès de CinetPay puis met à jour la ligne locale.
    Retour: {transaction_id, status, outcome} avec outcome:
      - "updated": ligne pending mise à jour
      - "unchanged": ligne déjà terminale (jamais réécrite)
      - "unknown": aucune ligne pour cette transaction
    Les erreurs provider/persistence sont propagées à l'appelant.
    """
    envelope = cinetpay_client.check_payment(transaction_id)
    data = envelope.get("data") or {}
    if not isinstance(data, dict):
        data = {}
    status = map_provider_status(data.get("status"))
    payment_method = data.get("payment_method") or None

    rows = repository.update_payment_verification(transaction_id, status.value, payment_method, data or None)
    if rows:
        if status is PaymentStatus.COMPLETED:
            _confirm_linked_order(transaction_id)
        return {"transaction_id": transaction_id, "status": status.value, "outcome": "updated"}

    current = repository.get_payment(transaction_id)
    if current is None:
        logger.warning("payments.verify unknown transaction_id=%s", transaction_id)
        return {"transaction_id": transaction_id, "status": None, "outcome": "unknown"}

    current_status = current.get("status")
    if current_status in TERMINAL_STATUSES and current_status != status.value:
        logger.info(
            "payments.verify ignored transition transaction_id=%s current=%s provider=%s",
            transaction_id, current_status, status.value,
        )
    return {"transaction_id": transaction_id, "status": current_status, "outcome": "unchanged"}

def handle_notification(payload: Any) -> Dict[str, Any]:
    """
    Webhook CinetPay: le payload n'est jamais cru, seul transaction_id en est extrait.
    - BadRequestError si transaction_id absent.
    - Toute autre erreur est journalisée et absorbée: CinetPay reçoit toujours un succès.
    """
    transaction_id = extract_transaction_id(payload)
    try:
        result = verify_payment(transaction_id)
        logger.info("payments.notify transaction_id=%s outcome=%s status=%s", transaction_id, result["outcome"], result["status"])
    except Exception:
        logger.exception("payments.notify processing failed transaction_id=%s", transaction_id)
    return {"success": True}

def get_payment_status(transaction_id: str) -> Optional[PaymentSnapshot]:
    """Lecture seule pour le polling: snapshot ou None si transaction inconnue."""
    row = repository.get_payment_snapshot(transaction_id)
    if not row:
        return None
    return PaymentSnapshot(**row)
