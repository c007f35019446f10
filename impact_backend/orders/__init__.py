"""
Module 'orders' (feature-first): panier, commandes boutique et checkout.
"""

from .cart import Cart, CartItem
from .repository import (
    ORDER_STATUSES,
    get_products_map,
    fetch_orders,
    fetch_order_items,
    update_order_status,
    confirm_order_for_payment,
    fetch_orders_for_stats,
    fetch_order_items_for_stats,
)
from .service import price_cart, checkout, change_order_status, dashboard_stats

__all__ = [
    # cart
    "Cart",
    "CartItem",
    # repository
    "ORDER_STATUSES",
    "get_products_map",
    "fetch_orders",
    "fetch_order_items",
    "update_order_status",
    "confirm_order_for_payment",
    "fetch_orders_for_stats",
    "fetch_order_items_for_stats",
    # services
    "price_cart",
    "checkout",
    "change_order_status",
    "dashboard_stats",
]
