"""
Structured logging configuration

JSON lines in deployed environments, a readable text format locally.
Application loggers live under the ``neurazor`` namespace and carry the
domain package they log for.
"""
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from core.config import settings

ROOT_LOGGER_NAME = "neurazor"
TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(domain)s] %(message)s"


class DomainFilter(logging.Filter):
    """Guarantee a ``domain`` attribute so text formats never fail"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "domain", None):
            record.domain = "app"
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding app, environment and domain fields"""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        log_record["app"] = settings.app_name
        log_record["environment"] = settings.environment
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["domain"] = getattr(record, "domain", "app")

        if record.exc_info and "exception" not in log_record:
            log_record["exception"] = self.formatException(record.exc_info)


def _build_formatter() -> logging.Formatter:
    if settings.log_format == "json":
        return CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    return logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def setup_logging() -> None:
    """Configure the root handler from settings"""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.addFilter(DomainFilter())
    console_handler.setFormatter(_build_formatter())
    root_logger.addHandler(console_handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.database_echo else logging.WARNING)


class LoggerAdapter(logging.LoggerAdapter):
    """Adds bound context (domain, game type, ...) to every record"""

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        # Per-call extra wins over bound context
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs

    def with_context(self, **context) -> "LoggerAdapter":
        """Bind additional context for a unit of work"""
        return LoggerAdapter(self.logger, {**self.extra, **context})


def get_logger(name: str, **context) -> LoggerAdapter:
    """
    Get a logger under the ``neurazor`` namespace

    Example:
        logger = get_logger("scoring.calculator", domain="d3_scoring")
        logger.with_context(game_type="reaction_time").info("Scores calculated")
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return LoggerAdapter(logging.getLogger(name), context)


setup_logging()
