__version__ = "1.0.0"

from .exceptions import InventoryError, ConfigError, FetchError, OutputError
from .models import AccountEntry, InstanceRecord, AccountResult, FetchStatus

from .config import InventorySettings, load_accounts, load_account_entries, load_settings

from .discovery import AccountFetcher, FanOutCoordinator, create_base_session, extract_name_tag

from .reporting import render, render_table, render_csv, render_failures, output_filename, write_csv

__all__ = [
    # Version
    '__version__',

    # Errors
    'InventoryError',
    'ConfigError',
    'FetchError',
    'OutputError',

    # Models
    'AccountEntry',
    'InstanceRecord',
    'AccountResult',
    'FetchStatus',

    # Configuration
    'InventorySettings',
    'load_accounts',
    'load_account_entries',
    'load_settings',

    # Discovery
    'AccountFetcher',
    'FanOutCoordinator',
    'create_base_session',
    'extract_name_tag',

    # Reporting
    'render',
    'render_table',
    'render_csv',
    'render_failures',
    'output_filename',
    'write_csv'
]
