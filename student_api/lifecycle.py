"""
Application Lifecycle

ApplicationLifecycle owns the one Flask application a process serves. The
first call to get_or_create_application() runs the initialization sequence
and caches the result; every later call returns the cached instance without
doing any work. There is no teardown: the instance lives as long as the
lifecycle object (normally the process).

Initialization steps, in order (INITIALIZATION_STEPS):

    a. base app bound to the root module, serverless log levels, database
    b. security headers and response compression
    c. CORS policy
    d. global route prefix
    e. global validation policy
    f. global error-translation filter
    g. global interceptors (logging, then transform)
    h. API documentation (skipped in production unless SWAGGER_ENABLED=true)
    i. finalization: mount module blueprints, synchronize schema

The cache is only written after every step succeeded. A failing step
propagates its exception and leaves the cache empty, so the next call
retries from scratch.

Concurrent first calls are not serialized by default: on Lambda a container
handles one request at a time. Pass serialize_creation=True on threaded
hosts to collapse concurrent first calls into a single initialization.
"""

import logging
import threading
from typing import Any, Mapping, Optional

from flask import Flask
from flask_cors import CORS

from .config import (
    CORS_ALLOWED_HEADERS,
    CORS_METHODS,
    AppSettings,
    DatabaseOptions,
    resolve_app_settings,
    resolve_database_options,
)
from .db import init_db, synchronize_schema
from .docs import DOCS_PATH, mount_api_docs
from .errors import register_error_handlers
from .interceptors import LoggingInterceptor, TransformInterceptor, use_global_interceptors
from .logging_config import SERVERLESS_LOG_LEVELS, configure_logging
from .middleware import use_security_middleware
from .modules import AppModule
from .pipes import ValidationPolicy, install_validation_policy

logger = logging.getLogger(__name__)

INITIALIZATION_STEPS = (
    "use_security_middleware",
    "enable_cors",
    "set_global_prefix",
    "use_global_pipes",
    "use_global_filters",
    "use_global_interceptors",
    "setup_api_docs",
    "finalize",
)


class ApplicationLifecycle:
    """
    Create-once, reuse-forever holder of the application instance.

    Args:
        settings: Application settings (default: resolved from os.environ)
        database_options: Connection options (default: resolved from os.environ)
        module: Root module whose blueprints are mounted
        config_overrides: Flask config applied before any extension reads it
        serialize_creation: Guard the create path with a lock
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        database_options: Optional[DatabaseOptions] = None,
        module: Optional[AppModule] = None,
        config_overrides: Optional[Mapping[str, Any]] = None,
        serialize_creation: bool = False,
    ):
        self.settings = settings if settings is not None else resolve_app_settings()
        self.database_options = (
            database_options if database_options is not None else resolve_database_options()
        )
        self.module = module if module is not None else AppModule()
        self.config_overrides = dict(config_overrides or {})
        self._instance: Optional[Flask] = None
        self._lock = threading.Lock() if serialize_creation else None

    @property
    def instance(self) -> Optional[Flask]:
        """The cached application, or None before the first successful creation."""
        return self._instance

    def get_or_create_application(self) -> Flask:
        app = self._instance
        if app is not None:
            return app

        if self._lock is None:
            return self._create_and_cache()

        with self._lock:
            # Another thread may have finished while this one waited
            if self._instance is not None:
                return self._instance
            return self._create_and_cache()

    def reset(self) -> None:
        """Drop the cached instance; the next call initializes a new one."""
        self._instance = None

    def _create_and_cache(self) -> Flask:
        app = self.create_application()
        self._instance = app
        logger.info("Application created and cached")
        return app

    def create_application(self) -> Flask:
        """Run the full initialization sequence and return a ready, uncached app."""
        logger.info("Creating application...")
        app = self.construct_base()
        for step in INITIALIZATION_STEPS:
            getattr(self, step)(app)
        return app

    # -- initialization steps -------------------------------------------------

    def construct_base(self) -> Flask:
        app = Flask("student_api")
        app.config["NODE_ENV"] = self.settings.node_env
        app.config.update(self.config_overrides)

        configure_logging(app, SERVERLESS_LOG_LEVELS, env=self.settings.node_env)
        init_db(app, self.database_options)
        app.extensions["app_module"] = self.module
        app.extensions["ready"] = False
        return app

    def use_security_middleware(self, app: Flask) -> None:
        use_security_middleware(app)

    def enable_cors(self, app: Flask) -> None:
        origins = [origin.strip() for origin in self.settings.cors_origin.split(",")]
        wildcard = "*" in origins
        credentials = self.settings.cors_credentials
        if wildcard and credentials:
            # Browsers refuse credentials on a literal "*"; never reflect arbitrary origins
            app.logger.warning("CORS_CREDENTIALS ignored: CORS_ORIGIN allows any origin")
            credentials = False
        CORS(
            app,
            origins="*" if wildcard else origins,
            send_wildcard=wildcard,
            supports_credentials=credentials,
            methods=list(CORS_METHODS),
            allow_headers=list(CORS_ALLOWED_HEADERS),
        )

    def set_global_prefix(self, app: Flask) -> None:
        app.config["API_PREFIX"] = self.settings.api_prefix.strip("/")

    def use_global_pipes(self, app: Flask) -> None:
        install_validation_policy(
            app,
            ValidationPolicy(whitelist=True, forbid_non_whitelisted=True, transform=True),
        )

    def use_global_filters(self, app: Flask) -> None:
        register_error_handlers(app)

    def use_global_interceptors(self, app: Flask) -> None:
        use_global_interceptors(app, LoggingInterceptor(), TransformInterceptor())

    def setup_api_docs(self, app: Flask) -> None:
        if not self.settings.docs_enabled:
            app.logger.info("API docs disabled")
            return
        mount_api_docs(app, self.settings.docs, DOCS_PATH)
        app.logger.info(f"API docs enabled at /{DOCS_PATH}")

    def finalize(self, app: Flask) -> None:
        self.module.mount(app, app.config["API_PREFIX"])
        synchronize_schema(app)
        app.extensions["ready"] = True
