"""Configuration loading from pyproject.toml."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from changelog_py.config.models import ChangelogPyConfig
from changelog_py.exceptions import ConfigNotFoundError, ConfigValidationError

logger = logging.getLogger(__name__)

TOOL_SECTION = "changelog-py"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find pyproject.toml in ``start`` or any of its parents.

    Args:
        start: Directory to start searching from (defaults to cwd)

    Returns:
        Path to the nearest pyproject.toml

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists up to the filesystem root
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or its parents")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_changelog_py_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.changelog-py]`` table, or an empty dict."""
    return pyproject.get("tool", {}).get(TOOL_SECTION, {})


def load_config(path: Path | None = None) -> ChangelogPyConfig:
    """Load configuration for the project at ``path``.

    A missing pyproject.toml or a missing ``[tool.changelog-py]`` section
    yields the defaults, so the tool works in repositories that are not
    Python projects.

    Raises:
        ConfigValidationError: If the section contains invalid values
    """
    try:
        pyproject_path = find_pyproject_toml(path)
    except ConfigNotFoundError:
        logger.debug("no pyproject.toml found, using default configuration")
        return ChangelogPyConfig()

    raw = extract_changelog_py_config(load_pyproject_toml(pyproject_path))
    try:
        config = ChangelogPyConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid [tool.{TOOL_SECTION}] in {pyproject_path}:\n{e}") from e

    logger.debug("loaded configuration from %s", pyproject_path)
    return config
