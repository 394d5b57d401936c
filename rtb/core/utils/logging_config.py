"""
Structured logging for the RTB sidebar service.

Production (PRODUCTION=true or Gunicorn) writes one JSON object per line;
development writes coloured single-line records. Structured fields travel on
the record as ``record.context`` and are rendered by both formatters.
"""

import os
import sys
import json
import logging
from datetime import datetime, timezone


def _context_of(record: logging.LogRecord) -> dict:
    return getattr(record, 'context', None) or {}


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        entry.update(_context_of(record))
        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


class DevelopmentFormatter(logging.Formatter):
    """Readable one-liners for a terminal."""

    COLORS = {
        logging.DEBUG: '\033[36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelno, '')
        stamp = datetime.fromtimestamp(record.created).strftime('%H:%M:%S')
        line = f'{stamp} {color}{record.levelname:<7}{self.RESET if color else ""} {record.name}: {record.getMessage()}'

        context = _context_of(record)
        if context:
            line += '  ' + ' '.join(f'{k}={v}' for k, v in context.items())
        if record.exc_info:
            line += '\n' + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: str = 'INFO',
    json_format: bool = None,
    logger_name: str = 'rtb'
) -> logging.Logger:
    """Attach a single stdout handler to the ``rtb`` logger tree and return it.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Force JSON (True) or development (False) output. None
            picks JSON under PRODUCTION=true or Gunicorn.
        logger_name: Root of the logger tree, child loggers inherit the handler.
    """
    if json_format is None:
        json_format = (os.environ.get('PRODUCTION', '').lower() == 'true'
                       or 'gunicorn' in os.environ.get('SERVER_SOFTWARE', ''))

    logger = logging.getLogger(logger_name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Re-running setup (tests, reloader) must not stack handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if json_format else DevelopmentFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str = 'rtb') -> logging.Logger:
    """Logger under the rtb tree, e.g. get_logger('rtb.app')."""
    return logging.getLogger(name)


def log_with_context(logger: logging.Logger, level: int, message: str, **context):
    """Log message with structured key/value fields.

    Nothing is built when the level is disabled, so per-event debug logging
    stays cheap in production.
    """
    if logger.isEnabledFor(level):
        logger.log(level, message, extra={'context': context})
