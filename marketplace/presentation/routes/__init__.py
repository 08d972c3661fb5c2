"""
Routes package for the marketplace API
Organized by resource, mirroring the business layer
"""

from marketplace.logger import get_logger

logger = get_logger("marketplace.routes")


def init_app(app):
    """Initialize all route blueprints with the Flask app"""
    logger.debug("Initializing route blueprints")

    from . import deliveries, inventory, main, orders

    app.register_blueprint(main.bp)
    app.register_blueprint(orders.bp, url_prefix='/orders')
    app.register_blueprint(deliveries.bp, url_prefix='/deliveries')
    app.register_blueprint(inventory.bp, url_prefix='/inventory')

    logger.info("Registered marketplace blueprints")
