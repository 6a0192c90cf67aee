"""
Accounts file loading

The accounts file is a JSON array of objects:

    [{"account_id": "111111111111", "role_arn": "arn:aws:iam::111111111111:role/Inventory"}]
"""
import json
import logging
from typing import Any, Dict, List

from ..exceptions import ConfigError
from ..models import AccountEntry

logger = logging.getLogger(__name__)

ACCOUNT_FIELDS = ('account_id', 'role_arn')


def _parse_entry(index: int, item: Any) -> AccountEntry:
    if not isinstance(item, dict):
        raise ConfigError(f"Entry {index} is not an object: {item!r}")

    values = {}
    for key in ACCOUNT_FIELDS:
        value = item.get(key, "")
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise ConfigError(f"Entry {index}: '{key}' must be a string, got {type(value).__name__}")
        values[key] = value

    missing = [key for key in ACCOUNT_FIELDS if not values[key]]
    if missing:
        logger.warning(f"Entry {index} has empty or missing field(s): {', '.join(missing)}")

    return AccountEntry(**values)


def load_account_entries(path: str) -> List[AccountEntry]:
    """Read and decode the accounts file into entries, in file order"""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Failed to read accounts file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Failed to parse accounts file {path}: {e}") from e

    if not isinstance(data, list):
        raise ConfigError(f"Accounts file {path} must contain a JSON array, got {type(data).__name__}")

    return [_parse_entry(index, item) for index, item in enumerate(data)]


def load_accounts(path: str) -> Dict[str, str]:
    """
    Load the accounts file into a mapping of account ID to role ARN.

    Repeated account IDs collapse to the last entry.

    Raises:
        ConfigError: file unreadable or not an array of account objects
    """
    accounts: Dict[str, str] = {}
    for entry in load_account_entries(path):
        if entry.account_id in accounts:
            logger.warning(f"Duplicate account {entry.account_id}; using the last role ARN")
        accounts[entry.account_id] = entry.role_arn
    return accounts
