# SPDX-License-Identifier: Apache-2.0
"""Configuration management for jsonguard."""

from .loader import ConfigVersionError, discover_config, load_config
from .settings import (
    CURRENT_CONFIG_VERSION,
    DEFAULT_CONFIG_FILENAME,
    MIN_SUPPORTED_VERSION,
    CheckConfig,
)

__all__ = [
    "CheckConfig",
    "CURRENT_CONFIG_VERSION",
    "MIN_SUPPORTED_VERSION",
    "DEFAULT_CONFIG_FILENAME",
    "load_config",
    "discover_config",
    "ConfigVersionError",
]
