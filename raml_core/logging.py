"""
Logging configuration for the RAML server dispatcher.
"""
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from loguru import logger

# Lazy import settings to avoid circular dependency
_settings = None

_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def _get_settings():
    """Get settings with lazy loading."""
    global _settings
    if _settings is None:
        from raml_core.settings.config import settings as app_settings
        _settings = app_settings
    return _settings


def _resolve_log_path(default_path: Path) -> Path:
    try:
        default_path.parent.mkdir(parents=True, exist_ok=True)
        return default_path
    except OSError:
        fallback_dir = Path.cwd() / "logs"
        fallback_dir.mkdir(parents=True, exist_ok=True)
        return fallback_dir / default_path.name


class LoguruHandler(logging.Handler):
    """Forward stdlib logging records (uvicorn, starlette) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


def setup_logging():
    """Configure loguru logger with appropriate settings."""
    settings = _get_settings()

    logger.remove()
    logger.configure(extra={"service": settings.app_name, "environment": settings.environment})

    log_level = (settings.log_level or "INFO").upper()
    env_level = os.getenv("LOG_LEVEL", "").upper()
    if env_level:
        log_level = env_level

    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=log_level,
        colorize=True,
    )

    log_path = None
    if settings.log_file:
        log_path = _resolve_log_path(Path(settings.log_file))
        logger.add(
            log_path,
            format=_FILE_FORMAT,
            level="DEBUG",
            rotation="100 MB",
            retention="30 days",
            compression="zip",
        )
        error_log_path = _resolve_log_path(log_path.parent / "errors.log")
        logger.add(
            str(error_log_path),
            format=_FILE_FORMAT,
            level="ERROR",
            rotation="50 MB",
            retention="90 days",
            compression="zip",
        )

    root_logger = logging.getLogger()
    root_logger.handlers = [LoguruHandler()]
    root_logger.setLevel(logging.INFO)

    logger.info("Logging initialized - Level: {}, File: {}", log_level, log_path or "-")
    return logger


_log = None


def _get_log():
    """Get or initialize the logger."""
    global _log
    if _log is None:
        try:
            _log = setup_logging()
        except Exception as exc:
            # Settings may be unusable while bootstrapping; keep loguru defaults
            logger.warning("Logging setup failed, using defaults: {}", exc)
            _log = logger
    return _log


log = _get_log()
