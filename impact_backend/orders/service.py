"""
Cas d'usage 'orders': checkout de la boutique.
Le panier client est reprixé depuis shop_products (les prix envoyés par le
navigateur sont ignorés), la commande est enregistrée puis le paiement est
initialisé via l'adaptateur CinetPay.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

from impact_backend import config
from impact_backend.errors import NotFoundError, ValidationError
from impact_backend.payments import service as payments_service
from . import repository
from .cart import Cart, CartItem

logger = logging.getLogger(__name__)

def _clean(value: Any) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None

# module impact_backend.orders.service
def price_cart(raw_items: List[Dict[str, Any]]) -> Cart:
    """
    Reconstruit le panier avec les prix/noms de la base.
    - Soulève ValidationError si le panier est vide ou si aucun article n'est valide.
    """
    requested = Cart.from_items(raw_items)
    if not requested:
        raise ValidationError("Panier vide")

    products = repository.get_products_map(requested.quantities().keys())
    priced = Cart()
    for line in requested.items:
        product = products.get(line.id)
        if not product:
            continue
        try:
            price = float(product.get("price") or 0)
        except (TypeError, ValueError):
            continue
        if price <= 0:
            continue
        priced.add(
            CartItem(
                id=line.id,
                name=product.get("name") or "Article",
                price=price,
                product_type=product.get("product_type") or "physical",
            ),
            line.quantity,
        )
    if not priced:
        raise ValidationError("Aucun article valide")
    return priced

def checkout(body: Mapping[str, Any], origin: Optional[str] = None) -> Dict[str, Any]:
    """
    Checkout boutique:
      1) nom + téléphone obligatoires, panier non vide
      2) reprix depuis shop_products
      3) insert shop_orders + shop_order_items
      4) initialisation du paiement (description "Commande Impact Shop - <n°>")
      5) rattachement payment_id = transaction_id
    Retour: {order_id, order_number, payment_url, transaction_id}
    """
    name = _clean(body.get("customer_name"))
    phone = _clean(body.get("customer_phone"))
    if not name or not phone:
        raise ValidationError("Nom et téléphone requis.")

    cart = price_cart(body.get("items") or [])
    total = payments_service.round_amount(cart.total_price)
    if total < config.PAYMENT_MIN_AMOUNT or total > config.PAYMENT_MAX_AMOUNT:
        raise ValidationError(payments_service.AMOUNT_RANGE_MESSAGE)

    order = repository.insert_order({
        "customer_name": name,
        "customer_phone": phone,
        "customer_email": _clean(body.get("customer_email")),
        "shipping_address": _clean(body.get("shipping_address")),
        "notes": _clean(body.get("notes")),
        "total_amount": total,
    })
    order_id = order.get("id")
    order_number = order.get("order_number") or ""

    repository.insert_order_items([
        {
            "order_id": order_id,
            "product_id": item.id,
            "product_name": item.name,
            "quantity": item.quantity,
            "unit_price": item.price,
            "total_price": item.total_price,
        }
        for item in cart.items
    ])

    result = payments_service.initialize_payment(
        {
            "amount": total,
            "customer_name": name,
            "customer_phone": phone,
            "customer_email": _clean(body.get("customer_email")),
            "description": f"Commande Impact Shop - {order_number}",
        },
        origin=origin,
    )
    repository.set_order_payment(order_id, result.transaction_id)
    logger.info("orders.checkout order_id=%s transaction_id=%s total=%s", order_id, result.transaction_id, total)

    return {
        "order_id": order_id,
        "order_number": order_number,
        "payment_url": result.payment_url,
        "transaction_id": result.transaction_id,
    }

def change_order_status(order_id: str, status: str) -> Dict[str, Any]:
    """Mise à jour admin du statut (pending, confirmed, shipped, delivered, cancelled)."""
    if status not in repository.ORDER_STATUSES:
        raise ValidationError(f"Statut invalide: {status}")
    row = repository.update_order_status(order_id, status)
    if row is None:
        raise NotFoundError("Commande introuvable")
    return row

def _number(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0

def dashboard_stats(top: int = 10) -> Dict[str, Any]:
    """
    Agrégats du tableau de bord admin:
    - total_orders, pending_orders, delivered_orders
    - total_revenue: somme des total_amount hors commandes annulées
    - top_products: produits classés par chiffre d'affaires (nom, quantité, CA)
    """
    orders = repository.fetch_orders_for_stats()
    items = repository.fetch_order_items_for_stats()

    sales: Dict[str, Dict[str, Any]] = {}
    for item in items:
        name = item.get("product_name") or "Article"
        entry = sales.setdefault(name, {"name": name, "quantity": 0, "revenue": 0.0})
        entry["quantity"] += int(_number(item.get("quantity")))
        entry["revenue"] += _number(item.get("total_price"))

    return {
        "total_orders": len(orders),
        "total_revenue": sum(_number(o.get("total_amount")) for o in orders if o.get("status") != "cancelled"),
        "pending_orders": sum(1 for o in orders if o.get("status") == "pending"),
        "delivered_orders": sum(1 for o in orders if o.get("status") == "delivered"),
        "top_products": sorted(sales.values(), key=lambda p: p["revenue"], reverse=True)[:top],
    }
