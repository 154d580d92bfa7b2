"""structlog configuration for applications embedding the WebUntis client.

Client modules only call get_logger() and emit event-style messages with
key/value context (untis_request, unusual_session_id_length, ...). Output
format is chosen once by the application through setup_logging().
"""

import logging
import sys

import structlog

# Event keys that must never reach a log sink
SECRET_KEYS: frozenset[str] = frozenset(
    {"password", "session_id", "sessionId", "cookie", "Cookie", "JSESSIONID"}
)
REDACTED = "***"


def redact_secrets(logger, method_name: str, event_dict: dict) -> dict:
    """structlog processor replacing secret values, including in header dicts."""
    for key, value in event_dict.items():
        if key in SECRET_KEYS:
            event_dict[key] = REDACTED
        elif isinstance(value, dict):
            event_dict[key] = {
                k: REDACTED if k in SECRET_KEYS else v for k, v in value.items()
            }
    return event_dict


def setup_logging(json_output: bool = False, log_level: str = "INFO") -> None:
    """Configure structlog and route stdlib logging (aiohttp) to stderr.

    stdout is left alone so scripts can print JSON results there.

    Args:
        json_output: JSON lines (production) instead of the console renderer.
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL. Unknown -> INFO.
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers = [logging.StreamHandler(sys.stderr)]
    root.setLevel(numeric_level)


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)
