"""
Logging configuration for applications embedding the runtime SPI adapter.

The adapter itself only emits records through module loggers. Embedding
applications call setup_global_logging() once at startup:
- Cloud Run: google-cloud-logging with trace correlation
- Local/Test: JSON lines on stdout
"""

import json
import logging
import os
from datetime import UTC, datetime

# httpx logs every request at INFO; the adapter already logs "<VERB> <url>"
HTTP_CLIENT_LOGGERS = ("httpx", "httpcore")


class JsonFormatter(logging.Formatter):
    """
    JSON log formatter.

    Produces one JSON object per record with the same keys Cloud Logging
    uses, so local and hosted logs look alike.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_object = {
            "timestamp": datetime.now(UTC).isoformat(),
            "severity": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_object["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields") and isinstance(record.extra_fields, dict):
            log_object.update(record.extra_fields)

        return json.dumps(log_object, default=str)


def _install_json_handler(level_name: str) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    for h in list(root_logger.handlers):
        root_logger.removeHandler(h)
    root_logger.addHandler(handler)
    root_logger.setLevel(level_name)


def setup_global_logging(level: str | None = None) -> None:
    """
    Configure global logging based on environment.

    Args:
        level: Root log level name; defaults to LOG_LEVEL or INFO.

    On Cloud Run (K_SERVICE is set) records go through google-cloud-logging.
    Everywhere else, or when the Cloud Logging client cannot be created, a
    single stdout handler with JsonFormatter is installed on the root logger.
    HTTP client loggers are held at WARNING unless DEBUG is requested.
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    if os.getenv("K_SERVICE") is not None:
        try:
            import google.cloud.logging

            client = google.cloud.logging.Client()
            client.setup_logging(log_level=getattr(logging, level_name, logging.INFO))
            logging.info("Cloud Logging initialized for Cloud Run.")
        except Exception as e:
            _install_json_handler(level_name)
            logging.warning(f"Cloud Logging setup failed, logging to stdout: {e}")
    else:
        _install_json_handler(level_name)

    if level_name != "DEBUG":
        for name in HTTP_CLIENT_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
