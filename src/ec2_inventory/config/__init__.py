"""Accounts file and runtime settings loading"""

from .accounts import load_accounts, load_account_entries
from .settings import InventorySettings, load_settings, get_default_settings

__all__ = [
    'load_accounts',
    'load_account_entries',
    'InventorySettings',
    'load_settings',
    'get_default_settings'
]
