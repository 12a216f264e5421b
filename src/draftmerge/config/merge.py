"""Defaults for merge runs and CLI output."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final

from draftmerge.domain.draft import DEFAULT_SOURCE

from .env import optional_env_var
from .errors import ConfigurationError

DEFAULT_LOG_LEVEL: Final[str] = "INFO"


@dataclass(frozen=True, slots=True)
class MergeConfig:
    default_source: str = DEFAULT_SOURCE
    log_level: int = logging.INFO


def _parse_log_level(name: str) -> int:
    level = logging.getLevelNamesMapping().get(name.upper())
    if level is None:
        raise ConfigurationError(f"Unknown log level for DRAFTMERGE_LOG_LEVEL: {name}")
    return level


def get_merge_config() -> MergeConfig:
    source = optional_env_var("DRAFTMERGE_DEFAULT_SOURCE") or DEFAULT_SOURCE
    level_name = optional_env_var("DRAFTMERGE_LOG_LEVEL") or DEFAULT_LOG_LEVEL
    return MergeConfig(default_source=source, log_level=_parse_log_level(level_name))
