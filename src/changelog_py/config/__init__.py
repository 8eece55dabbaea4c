"""Configuration management for changelog-py."""

from __future__ import annotations

from changelog_py.config.loader import load_config
from changelog_py.config.models import (
    ChangelogConfig,
    ChangelogPyConfig,
    CommitsConfig,
    FiltersConfig,
    ForgeConfig,
)

__all__ = [
    "ChangelogConfig",
    "ChangelogPyConfig",
    "CommitsConfig",
    "FiltersConfig",
    "ForgeConfig",
    "load_config",
]
