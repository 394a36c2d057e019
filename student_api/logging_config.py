"""
Centralized Logging Configuration

Provides structured logging with JSON formatting for production
and human-readable formatting for development.
"""

import os
import sys
import logging
import json
from datetime import datetime
from typing import Iterable, Optional
from flask import Flask, has_request_context, request

# Level set used in constrained runtimes (Lambda): no DEBUG chatter
SERVERLESS_LOG_LEVELS = ("ERROR", "WARNING", "INFO")


class JsonFormatter(logging.Formatter):
    """
    JSON formatter for structured logging in production.

    Outputs one JSON object per line so CloudWatch Logs Insights can
    query the fields directly.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if has_request_context():
            log_data["request"] = {
                "method": request.method,
                "path": request.path,
                "remote_addr": request.remote_addr,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_data'):
            log_data["extra"] = record.extra_data

        # Source location for errors
        if record.levelno >= logging.ERROR:
            log_data["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """Human-readable formatter with colors for development."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, '')
        timestamp = datetime.utcnow().strftime('%H:%M:%S')

        log_parts = [
            f"{color}{record.levelname:8s}{self.RESET}",
            f"{timestamp}",
            f"{record.name:20s}",
            record.getMessage(),
        ]

        if has_request_context():
            log_parts.append(f"[{request.method} {request.path}]")

        message = " | ".join(log_parts)

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


def resolve_log_level(requested: str, allowed: Optional[Iterable[str]] = None) -> int:
    """
    Translate a level name into a logging level, clamped to the allowed set.

    Args:
        requested: Level name from LOG_LEVEL (unknown names mean INFO)
        allowed: Level names that may be emitted; the most verbose of them
            is the lowest level that can be configured

    Returns:
        Numeric logging level
    """
    level = getattr(logging, requested.upper(), None)
    if not isinstance(level, int):
        level = logging.INFO

    if allowed:
        floor = min(getattr(logging, name) for name in allowed)
        level = max(level, floor)
    return level


def configure_logging(
    app: Flask,
    allowed_levels: Optional[Iterable[str]] = None,
    env: Optional[str] = None,
) -> None:
    """
    Configure logging for the Flask application.

    Args:
        app: Flask application instance
        allowed_levels: Restricts output to these level names (see
            SERVERLESS_LOG_LEVELS); all levels when omitted
        env: Execution environment (default: NODE_ENV)

    Sets up:
    - JSON logging for production (NODE_ENV=production)
    - Colored logging otherwise
    - A single stdout handler on the root logger, unless the host runtime
      already installed one (the Lambda runtime ships records to CloudWatch
      through its own root handler)
    """
    env = env or os.environ.get('NODE_ENV') or 'development'
    log_level_str = os.environ.get('LOG_LEVEL', 'INFO').upper()
    log_level = resolve_log_level(log_level_str, allowed_levels)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Re-initialization must not stack handlers
    for handler in root_logger.handlers[:]:
        if getattr(handler, "_student_api", False):
            root_logger.removeHandler(handler)

    if not root_logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler._student_api = True

        if env == 'production':
            formatter = JsonFormatter()
        else:
            formatter = ColoredFormatter()

        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    app.logger.setLevel(log_level)

    # Reduce noise from verbose libraries
    logging.getLogger('werkzeug').setLevel(logging.WARNING)
    logging.getLogger('mangum').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)

    app.logger.info(f"Logging configured - Environment: {env}, Level: {logging.getLevelName(log_level)}")
