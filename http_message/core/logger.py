"""Structured logging for http-message events."""

import logging
from dataclasses import dataclass, field
from enum import StrEnum

import orjson
import structlog
from asgi_correlation_id import correlation_id
from beartype import beartype

from http_message.core.settings import settings


class LoggerError(Exception):
    """Raised when a log call carries an unknown icon or malformed extras."""


class LogLevel(StrEnum):
    """Levels accepted by HTTP_MESSAGE_LOG_LEVEL."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogIcon(StrEnum):
    """Icons tagging stream, upload, cache and adapter events."""

    DEFAULT = "📋"

    # Status & Results
    SUCCESS = "✅"
    ERROR = "❌"
    WARNING = "⚠️"

    # Operations
    PROCESSING = "🔄"
    COMPLETE = "✨"

    # Components
    ADAPTER = "🔌"
    NETWORK = "🌐"
    STREAMING = "📡"
    CACHE = "📦"
    VALIDATION = "✓"

    # Data & Content
    FILE = "📄"
    JSON = "📝"
    UPLOAD = "📤"


@dataclass
class LoggerConfig:
    """Logger options resolved from Settings."""
    debug: bool = field(default_factory=lambda: settings.DEBUG)
    app_name: str = field(default=settings.NAME)
    log_level: LogLevel = field(default_factory=lambda: LogLevel(settings.LOG_LEVEL))


def add_correlation_id(logger, method_name: str, event_dict: dict) -> dict:
    """Attach the current request correlation id, when one is bound."""
    request_id = correlation_id.get()
    if request_id:
        event_dict["correlation_id"] = request_id
    return event_dict


class BusinessRulesProcessor:
    """Normalize event text before rendering.

    Events are uppercased and cut to 80 characters. The optional ``icon``
    extra must be a ``LogIcon`` and is prepended only in debug mode.
    """

    def __init__(self, debug: bool) -> None:
        self.debug = debug

    @beartype
    def __call__(self, logger, name: str, event_dict: dict) -> dict:
        """Rewrite `event` in place and drop the `icon` extra."""
        try:
            event = str(event_dict.get("event", ""))[:80].upper()
            icon_enum = LogIcon(event_dict.pop("icon", LogIcon.DEFAULT))

            if self.debug:
                event = f"{icon_enum.value} {event}"

            event_dict["event"] = event
            return event_dict
        except ValueError as err:
            raise LoggerError("Unknown log icon, it must be a LogIcon member") from err
        except Exception as ex:
            raise LoggerError(f"Invalid extras passed to the logger: {ex}") from ex


def dev_pipeline_renderer(logger, name: str, event_dict: dict) -> str:
    """Render one event as `timestamp | LEVEL | EVENT | extras | file:line`."""
    reserved_keys = {"timestamp", "level", "event", "filename", "lineno"}

    timestamp = event_dict.get("timestamp", "")
    level = event_dict.get("level", LogLevel.INFO.value).upper()
    event = event_dict.get("event", "")
    filename = event_dict.get("filename", "")
    lineno = event_dict.get("lineno", "")

    location = f"{filename}:{lineno}" if filename else ""

    extra_kwargs = " | ".join(
        f"{k}={v}" for k, v in event_dict.items() if k not in reserved_keys
    )

    parts = [timestamp, level, event, extra_kwargs, location]
    return " | ".join(filter(None, parts))


def setup_logging(config: LoggerConfig) -> None:
    """Configure structlog: pipe lines in debug mode, orjson bytes otherwise."""
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
            additional_ignores=["logger"]
        ),
        BusinessRulesProcessor(debug=config.debug),
    ]

    if config.debug:
        processors = shared_processors + [dev_pipeline_renderer]
    else:
        processors = shared_processors + [
            add_correlation_id,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(serializer=orjson.dumps),
        ]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.BytesLoggerFactory() if not config.debug else structlog.PrintLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelNamesMapping()[config.log_level]),
        cache_logger_on_first_use=True,
    )


_default_config = LoggerConfig()
setup_logging(_default_config)

logger = structlog.get_logger(_default_config.app_name)
