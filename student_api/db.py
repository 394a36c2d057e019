"""
Database Utilities

Connection setup from resolved DatabaseOptions, schema synchronization and
the connectivity check used by the health endpoint.

SECURITY NOTES:
- Credentials come from the environment, never from code
- Only the host part of the connection URL is ever logged
"""

from flask import current_app
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from .models import db


def init_db(app, options):
    """
    Register the SQLAlchemy extension on the Flask app.

    Args:
        app: Flask application instance
        options: DatabaseOptions resolved from the environment

    A SQLALCHEMY_DATABASE_URI already present in app.config (tests, local
    SQLite) takes precedence over the PostgreSQL URL built from options;
    PostgreSQL-only engine options are dropped for other backends.
    """
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False  # Disable event system (saves memory)
    app.config.setdefault("SQLALCHEMY_DATABASE_URI", options.sqlalchemy_uri)

    url = make_url(app.config["SQLALCHEMY_DATABASE_URI"])
    if url.get_backend_name() == "postgresql":
        engine_options = options.engine_options()
    else:
        engine_options = {"echo": options.logging}
    app.config.setdefault("SQLALCHEMY_ENGINE_OPTIONS", engine_options)

    db.init_app(app)
    app.extensions["database_options"] = options

    app.logger.info(
        f"Database configured: {url.get_backend_name()} "
        f"{url.host or ''}{':' + str(url.port) if url.port else ''}/{url.database or ''}"
    )


def synchronize_schema(app):
    """
    Create missing tables for every registered entity.

    No-op unless the resolved options enable synchronization. Migrations are
    never run automatically.
    """
    options = app.extensions["database_options"]
    if options.migrations_run:
        raise RuntimeError("Automatic migrations are not supported")
    if not options.synchronize:
        app.logger.info("Schema synchronization disabled")
        return

    with app.app_context():
        tables = [entity.__table__ for entity in options.entities]
        db.create_all()
        app.logger.info(f"Schema synchronized: {', '.join(t.name for t in tables)}")


def check_db_connection():
    """
    Check if database connection is healthy.

    Returns:
        tuple: (success: bool, message: str)

    Used by health check endpoint to verify database connectivity.
    """
    try:
        db.session.execute(db.text("SELECT 1"))
        return True, "Database connection healthy"
    except SQLAlchemyError as e:
        current_app.logger.error(f"Database health check failed: {str(e)}")
        return False, f"Database connection failed: {e.__class__.__name__}"
