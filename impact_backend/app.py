# module impact_backend.app
import logging
from impact_backend.app_setup.factory import create_app

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# App globale
app = create_app()
