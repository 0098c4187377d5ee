# backend/herb/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db
from .services.document_store import STORE_EXTENSION_KEY, StorageError, build_store


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    # Initialize extensions (the SQL table is only used with STORE_BACKEND=sql)
    db.init_app(app)

    from . import models  # noqa: F401

    if app.config.get("STORE_BACKEND") == "sql":
        with app.app_context():
            db.create_all()

    app.extensions[STORE_EXTENSION_KEY] = build_store(app)
    app.logger.info("Document store: %s", app.config.get("STORE_BACKEND"))

    # Register blueprints
    from .routes.system import system_bp
    from .routes.collections import products_bp, customers_bp, users_bp, visits_bp, system_logs_bp
    from .routes.orders import orders_bp
    from .routes.portals import portals_bp
    from .routes.logs import logs_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(visits_bp)
    app.register_blueprint(system_logs_bp)
    app.register_blueprint(portals_bp)
    app.register_blueprint(logs_bp)
    app.register_blueprint(reports_bp)

    @app.errorhandler(StorageError)
    def handle_storage_error(e):
        # Strict-mode write failures and SQL read failures; the store already logged the cause
        app.logger.error("Request %s %s failed: %s", request.method, request.path, e)
        return {"message": str(e)}, 500

    @app.after_request
    def add_cors_headers(response):
        allowed = app.config.get("CORS_ALLOWED_ORIGINS", "*")
        origin = request.headers.get("Origin")
        if allowed == "*":
            response.headers["Access-Control-Allow-Origin"] = "*"
        elif origin and origin in {o.strip() for o in allowed.split(",")}:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
        else:
            return response
        response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization, X-User-Id"
        response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,PATCH,DELETE,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
