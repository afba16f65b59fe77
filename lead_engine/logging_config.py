"""
Structured logging configuration.

Called once from the API module and main.py. Supports text (human-readable)
and JSON formats via LOG_FORMAT env var. LOG_LEVEL defaults to INFO.
"""
import json
import logging
import sys
from datetime import datetime, timezone

from .config.settings import LOGGING_CONFIG


class JSONFormatter(logging.Formatter):
    """Single-line JSON log formatter for production log aggregators."""

    def format(self, record):
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry)


# Third-party loggers that are noisy at INFO
_NOISY_LOGGERS = [
    'uvicorn.access',
    'httpcore',
    'httpx',
]


_configured = False


def configure_logging(level_name=None, log_format=None, force=False):
    """
    Set up root logger with format/level from settings (env-backed).

    Later calls are no-ops unless force=True or explicit values are passed,
    so importing the API module does not undo what main.py set up.

    Environment variables:
        LOG_LEVEL  - Python log level name (default: INFO)
        LOG_FORMAT - "text" (default) or "json"
    """
    global _configured
    if _configured and not force and level_name is None and log_format is None:
        return
    _configured = True

    level_name = (level_name or LOGGING_CONFIG['level']).upper()
    level = getattr(logging, level_name, logging.INFO)

    log_format = (log_format or LOGGING_CONFIG['format']).lower()

    root = logging.getLogger()
    root.setLevel(level)

    # Remove any existing handlers to avoid duplicates on re-init
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if log_format == 'json':
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            '[%(asctime)s] %(levelname)s %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
        ))

    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
