"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var
from .errors import ConfigurationError
from .logging import configure_logging
from .merge import MergeConfig, get_merge_config

__all__ = [
    "ConfigurationError",
    "MergeConfig",
    "configure_logging",
    "get_merge_config",
    "optional_env_var",
]
