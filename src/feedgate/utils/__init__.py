"""Utility subpackage.

Public exports:
- Config dataclasses and validation utilities
- YAML/JSON/CSV IO convenience helpers
- Logging setup
"""

from .config import (
    CalendarConfig,
    FeedGateConfig,
    LocatorConfig,
    LoggingConfig,
    ReaderConfig,
    RelearnPolicy,
    deep_update,
    load_config,
    validate_config,
)
from .io import ensure_dir, load_yaml, save_csv, save_json, save_yaml
from .logging import setup_logging

__all__ = [
    # config
    "FeedGateConfig",
    "ReaderConfig",
    "CalendarConfig",
    "LocatorConfig",
    "LoggingConfig",
    "RelearnPolicy",
    "deep_update",
    "validate_config",
    "load_config",
    # io
    "ensure_dir",
    "load_yaml",
    "save_yaml",
    "save_json",
    "save_csv",
    # logging
    "setup_logging",
]
