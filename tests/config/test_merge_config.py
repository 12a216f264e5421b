from __future__ import annotations

import logging

import pytest

from draftmerge.config import ConfigurationError, get_merge_config, optional_env_var
from draftmerge.domain.draft import DEFAULT_SOURCE


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DRAFTMERGE_DEFAULT_SOURCE", raising=False)
    monkeypatch.delenv("DRAFTMERGE_LOG_LEVEL", raising=False)


def test_defaults_without_environment() -> None:
    config = get_merge_config()

    assert config.default_source == DEFAULT_SOURCE
    assert config.log_level == logging.INFO


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DRAFTMERGE_DEFAULT_SOURCE", "voice")
    monkeypatch.setenv("DRAFTMERGE_LOG_LEVEL", "debug")

    config = get_merge_config()

    assert config.default_source == "voice"
    assert config.log_level == logging.DEBUG


def test_blank_values_count_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DRAFTMERGE_DEFAULT_SOURCE", "   ")

    assert optional_env_var("DRAFTMERGE_DEFAULT_SOURCE") is None
    assert get_merge_config().default_source == DEFAULT_SOURCE


def test_unknown_log_level_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DRAFTMERGE_LOG_LEVEL", "chatty")

    with pytest.raises(ConfigurationError, match="DRAFTMERGE_LOG_LEVEL"):
        get_merge_config()
