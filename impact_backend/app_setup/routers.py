"""
Registre central des routers (paiement, boutique, admin, health).
- Paiement: /payment, plus l'alias /functions/v1/cinetpay-payment (URL historique de la vitrine)
- API v1: boutique (checkout)
- Admin: commandes, paiements, tableau de bord, Impact TV et paramètres du site
- Health: health_router
"""
from fastapi import FastAPI
from impact_backend.payments import views as payments_views
from impact_backend.orders import views as orders_views
from impact_backend.admin.views import router as admin_router
from impact_backend.broadcasts import views as broadcasts_views
from impact_backend.site_settings import views as site_settings_views
from impact_backend.health.router import router as health_router

LEGACY_PAYMENT_PREFIX = "/functions/v1/cinetpay-payment"

def register_routers(app: FastAPI) -> None:
    """
    Agrège tous les routers de l'application.
    - Le router de paiement n'a pas de préfixe propre: il est monté deux fois.
    """
    # Paiement CinetPay
    app.include_router(payments_views.router, prefix="/payment")
    app.include_router(payments_views.router, prefix=LEGACY_PAYMENT_PREFIX, include_in_schema=False)
    # API v1
    app.include_router(orders_views.router)
    # Admin
    app.include_router(admin_router)
    app.include_router(broadcasts_views.router)
    app.include_router(site_settings_views.router)
    # Health & monitoring
    app.include_router(health_router)
