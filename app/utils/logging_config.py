"""
Logging configuration for NFL Playoff Picks
Console output plus rotating files for the app, errors and admin changes
"""

import logging
import logging.handlers
import os
from logging import Filter

from flask import g, has_app_context, has_request_context, request

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


class RequestContextFilter(Filter):
    """Add request and caller context to log records"""

    def filter(self, record):
        if has_request_context():
            record.method = request.method
            record.path = request.path
            record.remote_addr = request.remote_addr
        else:
            record.method = "N/A"
            record.path = "N/A"
            record.remote_addr = "N/A"

        # Entry routes stash the decoded entry token on g
        token = g.get("entry_token") if has_app_context() else None
        record.caller = f"entry:{token['entry_id']}" if token else "-"
        return True


class ColoredFormatter(logging.Formatter):
    """Colored level names for the development console"""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record):
        color = self.COLORS.get(record.levelname)
        if color:
            # Color a copy so file handlers keep the plain level name
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def _rotating_handler(log_dir, filename, level, fmt, max_mb, backups):
    handler = logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, filename),
        maxBytes=max_mb * 1024 * 1024,
        backupCount=backups,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=FILE_DATEFMT))
    handler.addFilter(RequestContextFilter())
    return handler


def setup_logging(app):
    """
    Setup logging for the Flask application

    LOG_LEVEL sets the threshold, LOG_TO_CONSOLE and LOG_TO_FILE pick the
    outputs. File logs go to LOG_DIR: picks.log for everything, errors.log
    for errors with source locations, admin.log for admin changes.

    Args:
        app: Flask application instance
    """
    log_level = getattr(logging, app.config.get("LOG_LEVEL", "INFO").upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    admin_logger = logging.getLogger("app.routes.admin")
    for handler in admin_logger.handlers[:]:
        admin_logger.removeHandler(handler)

    if app.config.get("LOG_TO_CONSOLE", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        if app.debug:
            console_handler.setFormatter(
                ColoredFormatter(LOG_FORMAT + " [%(filename)s:%(lineno)d]", datefmt="%H:%M:%S")
            )
        else:
            console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=FILE_DATEFMT))
        console_handler.addFilter(RequestContextFilter())
        root_logger.addHandler(console_handler)

    if app.config.get("LOG_TO_FILE", True):
        log_dir = app.config.get("LOG_DIR", "logs")
        os.makedirs(log_dir, exist_ok=True)

        root_logger.addHandler(
            _rotating_handler(
                log_dir,
                "picks.log",
                log_level,
                LOG_FORMAT + " [%(method)s %(path)s] [%(remote_addr)s] [%(caller)s]",
                max_mb=10,
                backups=5,
            )
        )
        root_logger.addHandler(
            _rotating_handler(
                log_dir,
                "errors.log",
                logging.ERROR,
                LOG_FORMAT + " [%(pathname)s:%(lineno)d] [%(method)s %(path)s]",
                max_mb=5,
                backups=3,
            )
        )
        admin_logger.addHandler(
            _rotating_handler(
                log_dir,
                "admin.log",
                logging.INFO,
                LOG_FORMAT + " [%(remote_addr)s]",
                max_mb=5,
                backups=3,
            )
        )

    # Quiet third-party loggers
    for name in ("werkzeug", "flask_limiter", "sqlalchemy.engine"):
        logging.getLogger(name).setLevel(logging.WARNING)

    app.logger.info(f"Logging configured - Level: {logging.getLevelName(log_level)}")


def get_logger(name):
    """
    Get a logger instance with the specified name

    Args:
        name: Logger name (usually __name__)

    Returns:
        logging.Logger: Configured logger instance
    """
    return logging.getLogger(name)
