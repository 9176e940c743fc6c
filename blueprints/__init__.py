# =============================================================================
# BLUEPRINTS PACKAGE - FLASK BLUEPRINTS
# Organizzazione modulare delle route del Comporto Tracker
# =============================================================================

import logging

from flask import Flask

logger = logging.getLogger(__name__)

def register_blueprints(app: Flask, csrf=None):
    """Registra i blueprint sull'applicazione; le API JSON sono esenti da CSRF"""

    from .auth import auth_bp
    from .api import api_bp
    from .export import export_bp

    for blueprint in (auth_bp, api_bp, export_bp):
        app.register_blueprint(blueprint)
        if csrf is not None:
            csrf.exempt(blueprint)

    logger.info(f"Registered {len(app.blueprints)} blueprints")
