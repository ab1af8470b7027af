# backend/zlagoda/__init__.py
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .config import Config
from .errors import AppError
from .extensions import db, migrate


def register_error_handlers(app: Flask) -> None:
    """Map the error taxonomy onto JSON responses."""

    @app.errorhandler(AppError)
    def handle_app_error(exc: AppError):
        db.session.rollback()
        if exc.status_code >= 500:
            app.logger.error("%s: %s", type(exc).__name__, exc.message, exc_info=exc.__cause__ or exc)
        else:
            app.logger.info("%s (%s): %s", type(exc).__name__, exc.status_code, exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return jsonify({"error": exc.description}), exc.code
        db.session.rollback()
        app.logger.exception("Unhandled error")
        return jsonify({"error": "Internal server error"}), 500


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.employees import employees_bp
    from .routes.catalog import categories_bp, products_bp
    from .routes.store_products import store_products_bp
    from .routes.customer_cards import customer_cards_bp
    from .routes.checks import checks_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(employees_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(store_products_bp)
    app.register_blueprint(customer_cards_bp)
    app.register_blueprint(checks_bp)
    app.register_blueprint(reports_bp)

    register_error_handlers(app)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
