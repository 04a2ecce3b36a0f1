"""Loading configuration from pyproject.toml.

release-flow reads its settings from the ``[tool.release-flow]`` table.
The file is located by walking up from the starting directory.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from release_flow.config.models import ReleaseFlowConfig
from release_flow.exceptions import ConfigNotFoundError, ConfigValidationError

TOOL_KEY = "release-flow"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find pyproject.toml in ``start`` or any parent directory.

    Args:
        start: Directory to start from (defaults to the working directory)

    Returns:
        Path to the nearest pyproject.toml

    Raises:
        ConfigNotFoundError: If no pyproject.toml is found
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or any parent directory")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"File not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_release_flow_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.release-flow]`` table, or an empty dict."""
    return dict(pyproject.get("tool", {}).get(TOOL_KEY, {}))


def load_config(path: Path | None = None) -> ReleaseFlowConfig:
    """Load and validate release-flow configuration.

    A project without pyproject.toml, or without a ``[tool.release-flow]``
    table, gets the default configuration.

    Args:
        path: Project directory or pyproject.toml path

    Returns:
        Validated configuration

    Raises:
        ConfigValidationError: If the configuration is invalid
    """
    try:
        pyproject_path = _resolve(path)
    except ConfigNotFoundError:
        return ReleaseFlowConfig()

    data = extract_release_flow_config(load_pyproject_toml(pyproject_path))
    try:
        return ReleaseFlowConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid [tool.{TOOL_KEY}] configuration:\n{e}") from e


def get_project_name(path: Path | None = None) -> str:
    """Read ``[project].name`` from pyproject.toml.

    Raises:
        ConfigValidationError: If the name is missing
    """
    project = load_pyproject_toml(_resolve(path)).get("project", {})
    name = project.get("name")
    if not name:
        raise ConfigValidationError("No [project].name found in pyproject.toml")
    return str(name)


def get_project_version(path: Path | None = None) -> str:
    """Read ``[project].version`` from pyproject.toml.

    Raises:
        ConfigValidationError: If the version is missing
    """
    project = load_pyproject_toml(_resolve(path)).get("project", {})
    version = project.get("version")
    if not version:
        raise ConfigValidationError("No [project].version found in pyproject.toml")
    return str(version)


def _resolve(path: Path | None) -> Path:
    if path is None or path.is_dir():
        return find_pyproject_toml(path)
    return path
