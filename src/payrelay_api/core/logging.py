import logging
from logging.config import dictConfig

from .config import Settings

LOG_FORMAT = (
    "%(asctime)s %(levelname)s [%(name)s] "
    "[trace=%(trace_id)s span=%(span_id)s req=%(request_id)s] %(message)s"
)

# Client libraries that log every request at INFO/DEBUG
QUIET_LOGGERS = ("httpx", "httpcore", "aiosmtplib", "opentelemetry")


def _resolve_level(settings: Settings) -> int:
    # DEBUG=True lowers the default INFO level; an explicit LOG_LEVEL wins
    if settings.DEBUG and settings.LOG_LEVEL.upper() == "INFO":
        return logging.DEBUG
    return getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)


def configure_logging(settings: Settings) -> None:
    level = _resolve_level(settings)

    loggers = {name: {"level": logging.WARNING} for name in QUIET_LOGGERS}
    # Request/response dumps; emitted only when DebugLoggingMiddleware is enabled
    loggers["payrelay_api.debug"] = {
        "level": logging.DEBUG,
        "handlers": ["console"],
        "propagate": False,
    }

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": LOG_FORMAT}},
            "filters": {
                "request_id": {"()": "payrelay_api.common.middleware.RequestIDLogFilter"},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "filters": ["request_id"],
                    "level": level,
                }
            },
            "root": {"handlers": ["console"], "level": level},
            "loggers": loggers,
        }
    )
