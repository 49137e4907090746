"""Core engine components - configuration, logging, and exceptions."""

from circl_walkthrough.core.config import Config, StoreConfig, WalkthroughConfig
from circl_walkthrough.core.exceptions import (
    WalkthroughError,
    ConfigurationError,
    PersistenceError,
    ReentrancyRejection,
)
from circl_walkthrough.core.logging import setup_logging, get_logger, log_transition

__all__ = [
    "Config",
    "StoreConfig",
    "WalkthroughConfig",
    "WalkthroughError",
    "ConfigurationError",
    "PersistenceError",
    "ReentrancyRejection",
    "setup_logging",
    "get_logger",
    "log_transition",
]
