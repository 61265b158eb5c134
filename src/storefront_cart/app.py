import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, jsonify
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from storefront_cart.core.config import Config, get_config
from storefront_cart.core.dependencies import DependencyContainer
from storefront_cart.core.exceptions import BaseAPIException
from storefront_cart.db import create_db_engine, init_storage_schema
from storefront_cart.repositories.storage import SqlStorage
from storefront_cart.routes import cart_bp
from storefront_cart.services.product_service import ProductCatalogClient
from storefront_cart.services.session_registry import CartSessionRegistry

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[Config] = None,
    catalog: Optional[ProductCatalogClient] = None,
    engine: Optional[Engine] = None,
) -> Flask:
    """
    Application factory and composition root.

    The cart session registry, the catalog client and the storage engine
    are built here once and handed to the blueprint through the app's
    dependency container; nothing is looked up from module globals.
    """
    config = config or get_config()

    logging.basicConfig(
        level=config.app.log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    app = Flask(__name__)
    app.config["DEBUG"] = config.app.debug

    engine = engine or create_db_engine(config.database)
    init_storage_schema(engine)
    catalog = catalog or ProductCatalogClient.from_config(config.catalog)

    container = DependencyContainer()
    container.register_singleton(Config, config)
    container.register_singleton(ProductCatalogClient, catalog)
    container.register_factory(
        CartSessionRegistry,
        lambda: CartSessionRegistry(
            storage_factory=lambda device_id: SqlStorage(engine, device_id),
            catalog=catalog,
            limit=config.app.session_limit,
        ),
    )
    app.extensions["storefront_cart"] = container

    app.register_blueprint(cart_bp, url_prefix="/api/v1/cart")

    # ------------------------------------------------------------------ #
    # Error handlers, consistent JSON error envelope                      #
    # ------------------------------------------------------------------ #
    @app.errorhandler(BaseAPIException)
    def api_error(e):
        logger.warning(f"{e.error_code}: {e.internal_message}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(400)
    def bad_request(e):
        return jsonify({"success": False, "error": str(e.description)}), 400

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"success": False, "error": str(e.description)}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"success": False, "error": str(e.description)}), 405

    @app.errorhandler(503)
    def service_unavailable(e):
        return jsonify({"success": False, "error": str(e.description)}), 503

    @app.errorhandler(SQLAlchemyError)
    def db_error(e):
        logger.error(f"Database error: {e}")
        return jsonify({"success": False, "error": "A database error occurred."}), 500

    @app.errorhandler(500)
    def internal_error(e):
        return jsonify({"success": False, "error": "An internal server error occurred."}), 500

    @app.get("/health")
    def health():
        """Liveness + readiness probe. Returns 503 if cart storage is unreachable."""
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return jsonify({
                "status": "ok",
                "database": "reachable",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }), 200
        except SQLAlchemyError as exc:
            logger.error(f"Health check failed: {exc}")
            return jsonify({"status": "error", "database": "unreachable"}), 503

    return app


if __name__ == "__main__":
    settings = get_config()
    application = create_app(settings)
    application.run(debug=settings.app.debug, host=settings.app.host, port=settings.app.port)
