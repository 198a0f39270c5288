"""
Pledge Portal
Flask Application Factory.

Usage:
    from portal import create_app
    app = create_app()           # defaults to APP_ENV or "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask, abort, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate

from portal.config import config
from portal.middleware.logging_config import configure_logging
from portal.middleware.rate_limiter import init_rate_limits
from portal.middleware.security_headers import init_security_headers
from portal.middleware.timing import init_request_timing
from portal.models import db
from portal.utils.errors import E, api_error

logger = logging.getLogger(__name__)

# ── SQLite FK enforcement (global engine event) ─────────────────────────
from sqlalchemy import event as _sa_event, engine as _sa_engine


@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],                     # no global limit, applied per blueprint
    storage_uri=os.getenv("REDIS_URL", "memory://"),
)

# Mutating /api/ requests must send JSON, except these multipart uploads
_MULTIPART_PATHS = ("/api/comptabilite/depenses/pdf",)


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config[config_name]())

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()],
             supports_credentials=True)
    else:
        CORS(app)

    # ── Security headers + request timing ────────────────────────────────
    init_security_headers(app)
    init_request_timing(app)

    # ── Request guards (input length + Content-Type) ─────────────────────
    @app.before_request
    def _guard_request():
        max_len = app.config.get("MAX_CONTENT_LENGTH")
        if max_len and request.content_length and request.content_length > max_len:
            abort(413, description="Request body too large")
        if request.method in ("POST", "PUT", "PATCH") and request.path.startswith("/api/"):
            ct = request.content_type or ""
            if request.path in _MULTIPART_PATHS and "multipart/form-data" in ct:
                return None
            if request.content_length and "json" not in ct:
                abort(415, description="Content-Type must be application/json")
        return None

    # ── Import all models so Alembic can detect them ─────────────────────
    from portal.models import campaign as _campaign_models     # noqa: F401
    from portal.models import contact as _contact_models       # noqa: F401
    from portal.models import document as _document_models     # noqa: F401
    from portal.models import event as _event_models           # noqa: F401
    from portal.models import product as _product_models       # noqa: F401
    from portal.models import project as _project_models       # noqa: F401
    from portal.models import user as _user_models             # noqa: F401

    # ── Auto-create tables (CREATE IF NOT EXISTS) + data directory ───────
    with app.app_context():
        try:
            db.create_all()
            app.logger.info("db.create_all() completed successfully")
        except Exception as e:
            app.logger.warning("db.create_all() failed: %s", e)
    os.makedirs(app.config["DATA_DIR"], exist_ok=True)

    # ── Blueprints ───────────────────────────────────────────────────────
    from portal.blueprints.accounting_bp import accounting_bp
    from portal.blueprints.auth_bp import auth_bp
    from portal.blueprints.campaigns_bp import campaigns_bp
    from portal.blueprints.contacts_bp import contacts_bp
    from portal.blueprints.documents_bp import documents_bp
    from portal.blueprints.events_bp import events_bp
    from portal.blueprints.expense_pdf_bp import expense_pdf_bp
    from portal.blueprints.health_bp import health_bp
    from portal.blueprints.products_bp import products_bp
    from portal.blueprints.projects_bp import projects_bp
    from portal.blueprints.servers_bp import servers_bp
    from portal.blueprints.specification_bp import specification_bp
    from portal.blueprints.technical_sheet_bp import technical_sheet_bp
    from portal.blueprints.update_log_bp import update_log_bp
    from portal.blueprints.validation_bp import validation_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(specification_bp)
    app.register_blueprint(update_log_bp)
    app.register_blueprint(expense_pdf_bp)
    app.register_blueprint(contacts_bp)
    app.register_blueprint(projects_bp)
    app.register_blueprint(campaigns_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(documents_bp)
    app.register_blueprint(events_bp)
    app.register_blueprint(accounting_bp)
    app.register_blueprint(technical_sheet_bp)
    app.register_blueprint(servers_bp)
    app.register_blueprint(validation_bp)

    # ── Error handlers ───────────────────────────────────────────────────
    @app.errorhandler(404)
    def not_found(e):
        return api_error(E.NOT_FOUND, "Not found", details={"path": request.path})

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {"error": "Method not allowed"}, 405

    @app.errorhandler(413)
    def too_large(e):
        return {"error": "Request body too large"}, 413

    @app.errorhandler(415)
    def unsupported_media_type(e):
        return {"error": "Content-Type must be application/json"}, 415

    @app.errorhandler(429)
    def rate_limited(e):
        return {"error": "Too many requests", "retry_after": e.description}, 429

    @app.errorhandler(500)
    def server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        return api_error(E.INTERNAL, "Internal Server Error")

    # ── Rate limiting (after blueprints registered) ──────────────────────
    init_rate_limits(app, limiter)

    return app
