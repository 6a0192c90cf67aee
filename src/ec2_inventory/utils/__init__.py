"""Logging helpers"""

from .logging_config import (
    StructuredFormatter,
    setup_logging,
    log_execution_time
)

__all__ = [
    'StructuredFormatter',
    'setup_logging',
    'log_execution_time'
]
