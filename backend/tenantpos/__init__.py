# backend/tenantpos/__init__.py
from flask import Flask, current_app, request
from sqlalchemy.exc import OperationalError
from werkzeug.exceptions import HTTPException

from .config import Config
from .errors import DomainError, TransientStoreError
from .extensions import db, migrate
from .responses import fail


def register_error_handlers(app: Flask) -> None:
    """
    Render every failure as {success: false, message, error}.

    Domain errors carry their own code and status. Storage timeouts become
    TransientStoreFailure. Anything else is logged with its traceback and
    reported as InternalError.
    """

    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        return fail(exc.message, exc.code, exc.status_code, **exc.details)

    @app.errorhandler(OperationalError)
    def handle_operational_error(exc: OperationalError):
        db.session.rollback()
        current_app.logger.warning("Storage failure on %s %s: %s", request.method, request.path, exc)
        error = TransientStoreError()
        return fail(error.message, error.code, error.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return fail(exc.description or exc.name, exc.name.replace(" ", ""), exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc: Exception):
        db.session.rollback()
        current_app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return fail("Internal server error", "InternalError", 500)


def create_app(config_object=Config) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.sessions import sessions_bp
    from .routes.tenants import tenants_bp
    from .routes.accounts import accounts_bp
    from .routes.categories import categories_bp
    from .routes.catalog_items import catalog_items_bp
    from .routes.service_types import service_types_bp
    from .routes.shifts import shifts_bp
    from .routes.sales import sales_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(sessions_bp)
    app.register_blueprint(tenants_bp)
    app.register_blueprint(accounts_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(catalog_items_bp)
    app.register_blueprint(service_types_bp)
    app.register_blueprint(shifts_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(reports_bp)

    register_error_handlers(app)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ALLOWED_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
