"""
Runtime settings for the inventory collector
"""
import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

import yaml

from ..exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_REGION = 'us-east-1'

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

# Expected YAML types per setting; None is also accepted for the optional ones
_FIELD_TYPES = {
    'max_workers': (int, 'an integer'),
    'task_timeout': ((int, float), 'a number'),
    'connect_timeout': ((int, float), 'a number'),
    'read_timeout': ((int, float), 'a number'),
    'max_attempts': (int, 'an integer'),
    'region': (str, 'a string'),
    'profile': (str, 'a string'),
    'paginate': (bool, 'true or false'),
    'page_size': (int, 'an integer'),
    'session_name': (str, 'a string'),
    'external_id': (str, 'a string'),
    'output_dir': (str, 'a string'),
    'log_level': (str, 'a string'),
}
_OPTIONAL_FIELDS = {'region', 'profile', 'page_size', 'external_id'}


@dataclass
class InventorySettings:
    """Settings shared by the coordinator and every account fetch"""
    max_workers: int = 10
    task_timeout: float = 120.0
    connect_timeout: float = 10.0
    read_timeout: float = 30.0
    max_attempts: int = 3
    region: Optional[str] = None
    profile: Optional[str] = None
    paginate: bool = True
    page_size: Optional[int] = None
    session_name: str = 'ec2-inventory'
    external_id: Optional[str] = None
    output_dir: str = '.'
    log_level: str = 'INFO'

    def validate(self) -> 'InventorySettings':
        for name, (expected, description) in _FIELD_TYPES.items():
            value = getattr(self, name)
            if value is None and name in _OPTIONAL_FIELDS:
                continue
            # bool is an int subclass, so it is only accepted where a bool is expected
            if isinstance(value, bool) != (expected is bool) or not isinstance(value, expected):
                raise ConfigError(f"{name} must be {description}, got {value!r}")

        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}")

        if self.max_workers < 1:
            raise ConfigError(f"max_workers must be at least 1, got {self.max_workers}")
        if self.task_timeout <= 0:
            raise ConfigError(f"task_timeout must be positive, got {self.task_timeout}")
        # DescribeInstances accepts MaxResults between 5 and 1000
        if self.page_size is not None and not 5 <= self.page_size <= 1000:
            raise ConfigError(f"page_size must be between 5 and 1000, got {self.page_size}")
        return self


def get_default_settings() -> Dict[str, Any]:
    """Get the default settings as a plain dictionary"""
    return {f.name: f.default for f in fields(InventorySettings)}


def _read_yaml(path: str) -> Dict[str, Any]:
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Failed to read settings file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse settings file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping")

    # Allow settings to be nested under an 'inventory' section
    section = data.get('inventory', data)
    if not isinstance(section, dict):
        raise ConfigError(f"Section 'inventory' in {path} must be a mapping")
    return section


def load_settings(path: Optional[str] = None, **overrides) -> InventorySettings:
    """
    Build settings from defaults, an optional YAML file, then overrides.

    Overrides whose value is None are ignored so unset CLI options do not
    mask values from the file.
    """
    known = {f.name for f in fields(InventorySettings)}
    values: Dict[str, Any] = {}

    if path:
        for key, value in _read_yaml(path).items():
            if key in known:
                values[key] = value
            else:
                logger.warning(f"Ignoring unknown setting '{key}' in {path}")

    for key, value in overrides.items():
        if value is None:
            continue
        if key not in known:
            raise ConfigError(f"Unknown setting '{key}'")
        values[key] = value

    try:
        return replace(InventorySettings(), **values).validate()
    except TypeError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
