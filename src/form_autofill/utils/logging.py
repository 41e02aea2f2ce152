"""Structured logging configuration using structlog."""

import logging
import sys
from typing import Any, Dict, Optional

import structlog
from rich.logging import RichHandler

from form_autofill.config import settings


def configure_logging(level: Optional[str] = None, debug: Optional[bool] = None) -> None:
    """Configure structured logging with rich output."""
    level_name = (level or settings.log_level).upper()
    use_console = settings.debug if debug is None else debug
    numeric_level = getattr(logging, level_name, logging.INFO)

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
        handlers=[RichHandler(rich_tracebacks=True, markup=True)],
        force=True,
    )

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.dev.ConsoleRenderer() if use_console else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.WriteLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def log_field_context(field: Any) -> Dict[str, Any]:
    """Create a log context for a classified form field."""
    target = getattr(field, "target", None)
    modality = getattr(field, "modality", None)
    return {
        "position": getattr(field, "position", None),
        "question": getattr(field, "question_text", ""),
        "modality": getattr(modality, "value", modality),
        "controls": len(target) if isinstance(target, (list, tuple)) else int(target is not None),
    }
