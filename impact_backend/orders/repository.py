"""
Accès aux données de la boutique (shop_products, shop_orders, shop_order_items).
"""
from typing import Any, Dict, Iterable, List, Optional
import logging
import impact_backend.infra.supabase_client as supabase_client
from impact_backend.errors import PersistenceError

logger = logging.getLogger(__name__)

ORDER_STATUSES = ("pending", "confirmed", "shipped", "delivered", "cancelled")

# module impact_backend.orders.repository
def fetch_products_by_ids(ids: List[str]) -> List[dict]:
    """
    Produits actifs par leurs IDs (table 'shop_products').
    - Retourne [] si ids vide.
    """
    if not ids:
        return []
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("shop_products")
            .select("id, name, price, currency, product_type, stock_quantity, is_active")
            .in_("id", [str(i) for i in ids])
            .eq("is_active", True)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.fetch_products_by_ids failed ids=%s", ids)
        raise PersistenceError("Erreur lors de la lecture des produits") from e
    return res.data or []

def get_products_map(ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
    """Retourne un dict {id: produit} à partir d'une liste d'IDs."""
    products = fetch_products_by_ids(list(ids))
    return {str(p.get("id")): p for p in products}

def insert_order(values: Dict[str, Any]) -> Dict[str, Any]:
    """
    Insère une commande 'pending'. order_number est remplacé par le trigger de la base.
    Retour: la ligne créée (id, order_number, ...).
    """
    row = {"order_number": "temp", "status": "pending", **values}
    try:
        res = supabase_client.get_service_supabase().table("shop_orders").insert(row).execute()
    except Exception as e:
        logger.exception("orders.repository.insert_order failed")
        raise PersistenceError("Erreur lors de la création de la commande") from e
    rows = res.data or []
    if not rows:
        raise PersistenceError("Erreur lors de la création de la commande")
    return rows[0]

def insert_order_items(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    try:
        res = supabase_client.get_service_supabase().table("shop_order_items").insert(items).execute()
    except Exception as e:
        logger.exception("orders.repository.insert_order_items failed count=%s", len(items))
        raise PersistenceError("Erreur lors de l'enregistrement des articles") from e
    return res.data or []

def set_order_payment(order_id: str, transaction_id: str) -> None:
    try:
        (
            supabase_client.get_service_supabase()
            .table("shop_orders")
            .update({"payment_id": transaction_id})
            .eq("id", order_id)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.set_order_payment failed order_id=%s", order_id)
        raise PersistenceError("Erreur lors du rattachement du paiement") from e

def confirm_order_for_payment(transaction_id: str) -> bool:
    """Passe la commande liée au paiement de 'pending' à 'confirmed' (True si une ligne change)."""
    res = (
        supabase_client.get_service_supabase()
        .table("shop_orders")
        .update({"status": "confirmed"})
        .eq("payment_id", transaction_id)
        .eq("status", "pending")
        .execute()
    )
    return bool(res.data)

def fetch_orders(limit: int = 100) -> List[dict]:
    """Commandes pour l'admin, de la plus récente à la plus ancienne."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("shop_orders")
            .select("*")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.fetch_orders failed")
        raise PersistenceError("Erreur lors de la lecture des commandes") from e
    return res.data or []

def fetch_order_items(order_id: str) -> List[dict]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("shop_order_items")
            .select("*")
            .eq("order_id", order_id)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.fetch_order_items failed order_id=%s", order_id)
        raise PersistenceError("Erreur lors de la lecture des articles") from e
    return res.data or []

def update_order_status(order_id: str, status: str) -> Optional[Dict[str, Any]]:
    """Met à jour le statut; retourne la ligne modifiée ou None si la commande est inconnue."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("shop_orders")
            .update({"status": status})
            .eq("id", order_id)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.update_order_status failed order_id=%s", order_id)
        raise PersistenceError("Erreur lors de la mise à jour de la commande") from e
    rows = res.data or []
    return rows[0] if rows else None

def fetch_orders_for_stats() -> List[dict]:
    """Toutes les commandes (statut et montant) pour le tableau de bord."""
    try:
        res = supabase_client.get_service_supabase().table("shop_orders").select("id, status, total_amount").execute()
    except Exception as e:
        logger.exception("orders.repository.fetch_orders_for_stats failed")
        raise PersistenceError("Erreur lors de la lecture des commandes") from e
    return res.data or []

def fetch_order_items_for_stats() -> List[dict]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("shop_order_items")
            .select("product_name, quantity, total_price")
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.fetch_order_items_for_stats failed")
        raise PersistenceError("Erreur lors de la lecture des articles") from e
    return res.data or []
