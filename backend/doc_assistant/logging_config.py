"""
Process-wide logging setup.

Console gets a short human-readable line. logs/app.log gets one JSON object per
record (rotated nightly, 30 days kept) including any routing fields passed via
``extra=``. Application Insights receives the same fields as custom dimensions
when a connection string is configured and opencensus-ext-azure is installed.
"""

import json
import logging
import threading
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

try:
    from opencensus.ext.azure.log_exporter import AzureLogHandler
except ImportError:  # pragma: no cover - optional dependency at runtime
    AzureLogHandler = None


# Routing and feedback fields accepted through ``extra=``
STRUCTURED_EXTRA_FIELDS = (
    "conversation_id",
    "conversation_record_id",
    "user_query",
    "assistant_response",
    "intent",
    "special_category",
    "search_terms",
    "num_hits",
    "num_ranked",
    "primary_url",
    "related_count",
    "fallback_used",
    "fallback_reason",
    "route_url",
    "matched_keyword",
    "retrieval_used",
    "message_length",
    "response_length",
    "feedback_rating",
    "feedback_reason_code",
    "tables_version",
    "error",
)

FREE_TEXT_FIELDS = frozenset({"user_query", "assistant_response"})
FREE_TEXT_LIMIT = 200

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
NOISY_LOGGERS = ("httpx", "openai", "azure")


def structured_fields(record: logging.LogRecord) -> Iterator[Tuple[str, Any]]:
    """(name, value) for every known extra field present on the record."""
    for name in STRUCTURED_EXTRA_FIELDS:
        if hasattr(record, name):
            value = getattr(record, name)
            if name in FREE_TEXT_FIELDS and isinstance(value, str):
                value = value[:FREE_TEXT_LIMIT]
            yield name, value


def _with_lock(handler: logging.Handler) -> logging.Handler:
    # opencensus AzureLogHandler leaves lock=None after createLock()
    if getattr(handler, "lock", None) is None:
        handler.createLock()
    if getattr(handler, "lock", None) is None:
        handler.lock = threading.RLock()
    return handler


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record):
        entry: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        entry.update(structured_fields(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class AppInsightsDimensionsFilter(logging.Filter):
    """Copy structured fields into ``custom_dimensions`` for Application Insights queries."""

    def filter(self, record: logging.LogRecord) -> bool:
        dimensions = dict(structured_fields(record))
        if dimensions:
            existing = getattr(record, "custom_dimensions", None)
            record.custom_dimensions = {**existing, **dimensions} if isinstance(existing, dict) else dimensions
        return True


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def _file_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(log_dir / "app.log", when="midnight", backupCount=30, utc=True)
    handler.suffix = "%Y-%m-%d"
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(StructuredFormatter())
    return handler


def _app_insights_handler(level: int, connection_string: str) -> Optional[logging.Handler]:
    if AzureLogHandler is None:
        logging.getLogger(__name__).warning(
            "Application Insights connection string is set but opencensus-ext-azure is not installed; "
            "Azure log export disabled."
        )
        return None
    try:
        handler = AzureLogHandler(connection_string=connection_string)
    except Exception as exc:
        logging.getLogger(__name__).warning("Failed to configure Application Insights handler: %s", exc)
        return None
    handler.setLevel(level)
    handler.addFilter(AppInsightsDimensionsFilter())
    return handler


def configure_logging(
    log_level: str = "INFO",
    app_insights_connection_string: Optional[str] = None,
    log_dir: Path = Path("logs"),
) -> None:
    """Attach the app's handlers to the root logger. Safe to call more than once."""
    level = getattr(logging, log_level.upper())
    root = logging.getLogger()
    root.setLevel(level)
    installed = {h.get_name() for h in root.handlers}

    builders = {
        "app_console_handler": _console_handler,
        "app_file_handler": lambda: _file_handler(log_dir),
    }
    if app_insights_connection_string:
        builders["app_insights_handler"] = lambda: _app_insights_handler(level, app_insights_connection_string)

    for name, build in builders.items():
        if name in installed:
            continue
        handler = build()
        if handler is None:
            continue
        handler.set_name(name)
        root.addHandler(_with_lock(handler))

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)
