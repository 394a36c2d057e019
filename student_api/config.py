"""
Application Configuration

Environment variables are resolved once into frozen settings objects that are
passed by value into the application lifecycle. Resolution performs no I/O
besides reading the environment mapping, so calling a resolver twice with an
unchanged environment yields equal values.
"""

import os
from typing import Mapping, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict
from sqlalchemy.engine import URL

from .models import Student, User

PRODUCTION = "production"
DEVELOPMENT = "development"

DEFAULT_DB_PORT = 5432

CORS_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")
CORS_ALLOWED_HEADERS = ("Content-Type", "Authorization")

# Fixed entity set registered with the ORM
ENTITIES = (User, Student)


def _env(environ: Mapping[str, str], key: str, default: Optional[str] = None) -> Optional[str]:
    """Read a variable, treating an empty string as unset."""
    value = environ.get(key)
    return value if value else default


def _parse_port(raw: Optional[str]) -> int:
    """
    Port from DATABASE_PORT, falling back to 5432 for missing, non-positive
    or non-integer values. The whole string must be an integer: "6543abc"
    and "54.3" fall back to 5432 rather than being cut at the first
    non-digit.
    """
    try:
        port = int(raw.strip())
    except (AttributeError, ValueError):
        return DEFAULT_DB_PORT
    return port if port > 0 else DEFAULT_DB_PORT


class SslOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    reject_unauthorized: bool = False


class DatabaseOptions(BaseModel):
    """Resolved database connection options."""

    model_config = ConfigDict(frozen=True)

    type: str = "postgres"
    host: str = "localhost"
    port: int = DEFAULT_DB_PORT
    username: str = "student_api"
    password: str = "password"
    database: str = "student_db"
    entities: Tuple[Type, ...] = ENTITIES
    synchronize: bool = True
    logging: bool = False
    ssl: Optional[SslOptions] = None
    migrations: Tuple[str, ...] = ()
    migrations_table_name: str = "migrations"
    migrations_run: bool = False

    @property
    def sqlalchemy_uri(self) -> str:
        url = URL.create(
            "postgresql+psycopg2",
            username=self.username,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
        )
        return url.render_as_string(hide_password=False)

    @property
    def sslmode(self) -> str:
        # libpq "require" encrypts without verifying the server certificate
        if self.ssl is None:
            return "disable"
        return "verify-full" if self.ssl.reject_unauthorized else "require"

    def engine_options(self) -> dict:
        """SQLAlchemy engine keyword arguments for a PostgreSQL connection."""
        return {
            "echo": self.logging,
            "connect_args": {"sslmode": self.sslmode},
            # Small pool: each serverless container serves one request at a time
            "pool_size": 5,
            "max_overflow": 5,
            "pool_timeout": 30,
            "pool_recycle": 3600,
            "pool_pre_ping": True,
        }


class ApiDocsConfig(BaseModel):
    """Metadata of the generated OpenAPI document."""

    model_config = ConfigDict(frozen=True)

    title: str = "Student API"
    description: str = "Student Management API Documentation"
    version: str = "1.0.0"
    tag: str = "student-api"


class AppSettings(BaseModel):
    """Every option the application lifecycle recognizes."""

    model_config = ConfigDict(frozen=True)

    node_env: Optional[str] = None
    cors_origin: str = "*"
    cors_credentials: bool = False
    api_prefix: str = "api"
    swagger_enabled: bool = False
    docs: ApiDocsConfig = ApiDocsConfig()

    @property
    def is_production(self) -> bool:
        return self.node_env == PRODUCTION

    @property
    def docs_enabled(self) -> bool:
        return self.swagger_enabled or not self.is_production


def resolve_database_options(environ: Optional[Mapping[str, str]] = None) -> DatabaseOptions:
    """
    Map DATABASE_* and NODE_ENV variables to connection options.

    Args:
        environ: Variables to read (default: os.environ)

    Returns:
        DatabaseOptions: schema sync everywhere but production, query logging
        only in development, TLS with relaxed certificate checks only in
        production
    """
    if environ is None:
        environ = os.environ
    node_env = _env(environ, "NODE_ENV")

    return DatabaseOptions(
        host=_env(environ, "DATABASE_HOST", "localhost"),
        port=_parse_port(_env(environ, "DATABASE_PORT")),
        username=_env(environ, "DATABASE_USERNAME", "student_api"),
        password=_env(environ, "DATABASE_PASSWORD", "password"),
        database=_env(environ, "DATABASE_NAME", "student_db"),
        synchronize=node_env != PRODUCTION,
        logging=node_env == DEVELOPMENT,
        ssl=SslOptions(reject_unauthorized=False) if node_env == PRODUCTION else None,
    )


def resolve_app_settings(environ: Optional[Mapping[str, str]] = None) -> AppSettings:
    """Map CORS_*, API_PREFIX, SWAGGER_* and NODE_ENV variables to settings."""
    if environ is None:
        environ = os.environ
    defaults = ApiDocsConfig()

    return AppSettings(
        node_env=_env(environ, "NODE_ENV"),
        cors_origin=_env(environ, "CORS_ORIGIN", "*"),
        cors_credentials=environ.get("CORS_CREDENTIALS") == "true",
        api_prefix=_env(environ, "API_PREFIX", "api"),
        swagger_enabled=environ.get("SWAGGER_ENABLED") == "true",
        docs=ApiDocsConfig(
            title=_env(environ, "SWAGGER_TITLE", defaults.title),
            description=_env(environ, "SWAGGER_DESCRIPTION", defaults.description),
            version=_env(environ, "SWAGGER_VERSION", defaults.version),
            tag=_env(environ, "SWAGGER_TAG", defaults.tag),
        ),
    )
