"""
Adaptateur CinetPay: centralise les appels HTTP et la configuration du provider.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from impact_backend import config
from impact_backend.errors import ConfigurationError, ProviderError, ProviderTimeoutError

logger = logging.getLogger(__name__)

# Code d'enveloppe CinetPay pour "paiement créé"
CREATED_CODE = "201"

# module impact_backend.payments.cinetpay_client
_transport: Optional[httpx.BaseTransport] = None

def set_transport(transport: Optional[httpx.BaseTransport]) -> None:
    """Remplace le transport httpx (tests: httpx.MockTransport). None = réseau réel."""
    global _transport
    _transport = transport

def require_cinetpay() -> Dict[str, str]:
    """
    Retourne les identifiants marchand {apikey, site_id}.
    - Lève ConfigurationError si CINETPAY_API_KEY / CINETPAY_SITE_ID sont absents.
    """
    if not config.CINETPAY_API_KEY:
        raise ConfigurationError("CINETPAY_API_KEY is not configured")
    if not config.CINETPAY_SITE_ID:
        raise ConfigurationError("CINETPAY_SITE_ID is not configured")
    return {"apikey": config.CINETPAY_API_KEY, "site_id": config.CINETPAY_SITE_ID}

def _post(path: str, body: Dict[str, Any]) -> Dict[str, Any]:
    url = f"{config.CINETPAY_BASE_URL}{path}"
    try:
        with httpx.Client(timeout=config.CINETPAY_TIMEOUT, transport=_transport) as client:
            resp = client.post(url, json=body, headers={"Content-Type": "application/json"})
    except httpx.TimeoutException as e:
        logger.error("cinetpay timeout path=%s: %s", path, e)
        raise ProviderTimeoutError(f"CinetPay timeout ({config.CINETPAY_TIMEOUT:g}s)")
    except httpx.HTTPError as e:
        logger.error("cinetpay transport error path=%s: %s", path, e)
        raise ProviderError(f"CinetPay injoignable: {e}")

    try:
        data = resp.json()
    except ValueError:
        raise ProviderError(f"Réponse CinetPay invalide (HTTP {resp.status_code})")
    if not isinstance(data, dict):
        raise ProviderError(f"Réponse CinetPay invalide (HTTP {resp.status_code})")
    return data

def create_payment(
    *,
    transaction_id: str,
    amount: int,
    currency: str,
    description: str,
    customer_name: str,
    customer_phone: str,
    customer_email: str,
    notify_url: str,
    return_url: str,
    cancel_url: str,
) -> Dict[str, Any]:
    """
    Initialise une transaction CinetPay (POST /payment).
    - channels="ALL": mobile money + carte, le client choisit côté CinetPay
    - Succès uniquement si l'enveloppe porte code == "201"
    Retour: data de l'enveloppe (contient payment_url).
    """
    body = {
        **require_cinetpay(),
        "transaction_id": transaction_id,
        "amount": int(amount),
        "currency": currency,
        "description": description,
        "customer_name": customer_name,
        "customer_phone_number": customer_phone,
        "customer_email": customer_email or "",
        "channels": "ALL",
        "notify_url": notify_url,
        "return_url": return_url,
        "cancel_url": cancel_url,
    }
    envelope = _post("/payment", body)
    logger.info("cinetpay init transaction_id=%s code=%s", transaction_id, envelope.get("code"))

    code = str(envelope.get("code") or "")
    if code != CREATED_CODE:
        logger.error("cinetpay init refused transaction_id=%s envelope=%s", transaction_id, envelope)
        raise ProviderError(f"CinetPay error [{code}]: {envelope.get('message')}", code=code)

    data = envelope.get("data") or {}
    if not data.get("payment_url"):
        raise ProviderError("URL de paiement non reçue", code=code)
    return data

def check_payment(transaction_id: str) -> Dict[str, Any]:
    """
    Vérifie une transaction auprès de CinetPay (POST /payment/check).
    Retour: l'enveloppe complète, data.status ∈ {ACCEPTED, REFUSED, ...}.
    """
    body = {**require_cinetpay(), "transaction_id": transaction_id}
    envelope = _post("/payment/check", body)
    logger.info(
        "cinetpay check transaction_id=%s code=%s status=%s",
        transaction_id,
        envelope.get("code"),
        (envelope.get("data") or {}).get("status"),
    )
    return envelope
