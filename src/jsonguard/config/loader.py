# SPDX-License-Identifier: Apache-2.0
"""Configuration loader with version validation."""

from __future__ import annotations

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from .settings import (
    CURRENT_CONFIG_VERSION,
    DEFAULT_CONFIG_FILENAME,
    MIN_SUPPORTED_VERSION,
    CheckConfig,
)

PathLike = Union[str, Path]


class ConfigVersionError(RuntimeError):
    """Error when configuration version is incompatible."""

    pass


def load_config(path: PathLike) -> CheckConfig:
    """Load and validate configuration from a YAML file.

    Args:
        path: Path to YAML configuration file

    Returns:
        CheckConfig instance

    Raises:
        ConfigVersionError: If config version is missing or too old
        FileNotFoundError: If the YAML file doesn't exist
        ValueError: If the YAML is invalid or contains invalid configuration
    """
    yaml_path = Path(path)
    if not yaml_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        with open(yaml_path, "r", encoding="utf-8") as f:
            yaml_content = f.read()

        expanded_content = os.path.expandvars(yaml_content)

        cfg_dict = yaml.safe_load(expanded_content)
        if cfg_dict is None:
            cfg_dict = {}
        if not isinstance(cfg_dict, dict):
            raise ValueError("YAML file must contain a mapping at the root level")

        normalized_data = _normalize_yaml_keys(cfg_dict)

        ver = str(normalized_data.get("config_version", ""))
        if not ver:
            raise ConfigVersionError(
                'config_version missing. Add `config_version: "1"` to your YAML.'
            )

        try:
            ver_num = int(ver)
        except ValueError:
            raise ConfigVersionError(
                f"config_version must be a whole number, got {ver!r}."
            ) from None

        if ver_num < int(MIN_SUPPORTED_VERSION):
            raise ConfigVersionError(
                f"Config version {ver} is too old. "
                f"Minimum supported is {MIN_SUPPORTED_VERSION}."
            )

        if ver_num > int(CURRENT_CONFIG_VERSION):
            warnings.warn(
                f"This version understands config_version {CURRENT_CONFIG_VERSION}, "
                f"but file is {ver}. Attempting best-effort parse.",
                UserWarning,
                stacklevel=2,
            )
        normalized_data["config_version"] = ver

        return CheckConfig(**normalized_data)

    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in configuration file: {e}") from e
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {path}: {e}") from e


def discover_config(root: PathLike, explicit: Optional[PathLike] = None) -> CheckConfig:
    """Return the configuration for a repository.

    An explicit path must exist. Otherwise ``.jsonguard.yaml`` at ``root`` is
    used when present, falling back to the defaults.
    """
    if explicit is not None:
        return load_config(explicit)

    candidate = Path(root) / DEFAULT_CONFIG_FILENAME
    if candidate.is_file():
        return load_config(candidate)
    return CheckConfig()


def _normalize_yaml_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize YAML keys from kebab-case to snake_case."""
    return {str(key).replace("-", "_"): value for key, value in data.items()}
