"""
Logging configuration for the EC2 inventory collector

Logs go to stderr so the inventory table on stdout can be piped or
redirected on its own.
"""
import functools
import json
import logging
import logging.config
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import colorlog

# SDK loggers are noisy at INFO; only their warnings are shown
QUIET_LOGGERS = ('boto3', 'botocore', 'urllib3')

CONSOLE_FORMAT = '%(asctime)s %(levelname)-8s %(message)s'
DETAILED_FORMAT = '%(asctime)s %(levelname)-8s [%(threadName)s] %(name)s: %(message)s'

_RESERVED_ATTRS = set(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'taskName'}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, including any `extra` fields"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'thread': record.threadName,
            'message': record.getMessage()
        }
        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        log_data.update(
            (key, value) for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and key not in log_data
        )
        return json.dumps(log_data, default=str)


def _formatter(log_format: str) -> Dict[str, Any]:
    if log_format == 'json':
        return {'()': StructuredFormatter}
    if log_format == 'detailed':
        return {'format': DETAILED_FORMAT, 'datefmt': '%Y-%m-%d %H:%M:%S'}
    if sys.stderr.isatty():
        return {
            '()': colorlog.ColoredFormatter,
            'format': '%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message)s',
            'datefmt': '%H:%M:%S'
        }
    return {'format': CONSOLE_FORMAT, 'datefmt': '%H:%M:%S'}


def setup_logging(log_level: str = 'INFO',
                  log_file: Optional[str] = None,
                  log_format: str = 'console') -> None:
    """
    Configure the `ec2_inventory` logger tree

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_file: Also write logs to this rotating file
        log_format: 'console' (coloured on a terminal), 'json' or 'detailed'
    """
    handlers = {
        'stderr': {
            'class': 'logging.StreamHandler',
            'formatter': 'main',
            'stream': 'ext://sys.stderr'
        }
    }
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers['file'] = {
            'class': 'logging.handlers.RotatingFileHandler',
            'formatter': 'main' if log_format == 'json' else 'file',
            'filename': log_file,
            'maxBytes': 10 * 1024 * 1024,
            'backupCount': 5,
            'encoding': 'utf-8'
        }

    handler_names = list(handlers)
    loggers = {name: {'level': 'WARNING', 'handlers': handler_names, 'propagate': False}
               for name in QUIET_LOGGERS}
    loggers['ec2_inventory'] = {'level': log_level.upper(), 'handlers': handler_names, 'propagate': False}

    logging.config.dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'main': _formatter(log_format),
            'file': {'format': DETAILED_FORMAT, 'datefmt': '%Y-%m-%d %H:%M:%S'}
        },
        'handlers': handlers,
        'loggers': loggers
    })


def log_execution_time(func):
    """Log how long the wrapped call took, or how long it ran before failing"""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger(func.__module__)
        start_time = time.monotonic()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(f"{func.__name__} failed after {time.monotonic() - start_time:.2f} seconds: {e}")
            raise

        logger.debug(f"{func.__name__} completed in {time.monotonic() - start_time:.2f} seconds")
        return result

    return wrapper
