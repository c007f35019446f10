"""
Taxonomie des erreurs métier (paiements, commandes, configuration).
Chaque erreur porte un message lisible et le code HTTP renvoyé au client
(voir app_setup.exceptions pour le rendu JSON {"error": ...}).
"""
from typing import Optional


class PaymentError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PaymentError):
    """Entrée appelant invalide: aucun enregistrement créé, aucun appel provider."""
    status_code = 400


class BadRequestError(PaymentError):
    status_code = 400


class ConfigurationError(PaymentError):
    """Secret/variable d'environnement obligatoire manquant."""
    status_code = 500


class ProviderError(PaymentError):
    """Réponse non conforme de CinetPay (code d'enveloppe, transport, JSON)."""
    status_code = 502

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class ProviderTimeoutError(ProviderError):
    status_code = 504


class PersistenceError(PaymentError):
    """Le store Supabase a rejeté une lecture/écriture."""
    status_code = 500


class NotFoundError(PaymentError):
    status_code = 404
