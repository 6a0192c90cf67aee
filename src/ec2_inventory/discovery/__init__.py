"""Multi-account EC2 instance discovery"""

from .fetcher import AccountFetcher, create_base_session, extract_name_tag
from .coordinator import FanOutCoordinator, merge_records

__all__ = [
    'AccountFetcher',
    'create_base_session',
    'extract_name_tag',
    'FanOutCoordinator',
    'merge_records'
]
