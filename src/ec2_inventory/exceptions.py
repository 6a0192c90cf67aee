"""
Exception hierarchy for the EC2 inventory collector
"""
from typing import Optional


class InventoryError(Exception):
    """Base class for all inventory errors"""


class ConfigError(InventoryError):
    """Accounts file or settings file could not be read or has the wrong shape"""


class FetchError(InventoryError):
    """Role assumption or instance query failed for one account"""

    def __init__(self, message: str, account_id: Optional[str] = None):
        super().__init__(message)
        self.account_id = account_id


class OutputError(InventoryError):
    """Report file could not be created or written"""
