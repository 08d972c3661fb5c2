from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import HTTPException
from marketplace.logger import get_logger

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
limiter = Limiter(key_func=get_remote_address)


def create_app(test_config=None):
    from marketplace.config import Config, INSTANCE_DIR

    app = Flask(__name__)

    logger = get_logger("marketplace")
    logger.info("Initializing Flask application")

    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    # SECURITY: Require SECRET_KEY - no fallback
    if not app.config.get('SECRET_KEY'):
        logger.critical("SECRET_KEY not set in environment! Application cannot start.")
        raise RuntimeError("SECRET_KEY environment variable is required")

    if app.config['SQLALCHEMY_DATABASE_URI'].startswith(f"sqlite:///{INSTANCE_DIR}"):
        INSTANCE_DIR.mkdir(parents=True, exist_ok=True)

    logger.debug(f"Database configured: {app.config['SQLALCHEMY_DATABASE_URI'].split(':', 1)[0]}")

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)

    logger.debug("Extensions initialized")

    # Import models to ensure they're registered with SQLAlchemy
    from marketplace.data.catalog.inventory_item import InventoryItem
    from marketplace.data.catalog.inventory_movement import InventoryMovement
    from marketplace.data.carts.cart import Cart, CartLine
    from marketplace.data.orders.order import Order, OrderLine
    from marketplace.data.orders.order_status_history import OrderStatusHistory
    from marketplace.data.deliveries.delivery import Delivery, DeliveryTimelineEntry

    logger.debug("Models imported and registered")

    # Identity comes from the upstream provider via request headers
    from marketplace import auth  # noqa: F401  registers the request loader

    from marketplace.presentation.routes import init_app as init_routes
    init_routes(app)

    _register_error_handlers(app, logger)

    logger.info("Flask application initialization complete")

    return app


def _register_error_handlers(app, logger):
    from marketplace.errors import MarketplaceError
    from marketplace.utils.logging_sanitizer import sanitize_exception_message

    @app.errorhandler(MarketplaceError)
    def handle_marketplace_error(error):
        db.session.rollback()
        logger.warning(f"{error.code}: {error.message}")
        return jsonify({'error': error.to_dict()}), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return jsonify({'error': {
            'code': error.name.replace(' ', ''),
            'message': error.description,
            'details': {},
        }}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        # Never leak internals; anything uncommitted is discarded
        db.session.rollback()
        logger.exception(f"Unhandled error: {sanitize_exception_message(error)}")
        return jsonify({'error': {
            'code': 'ServerError',
            'message': 'An unexpected error occurred',
            'details': {},
        }}), 500
