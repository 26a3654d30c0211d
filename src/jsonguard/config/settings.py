# SPDX-License-Identifier: Apache-2.0
"""Pydantic configuration model for check runs."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

PathLike = Union[str, Path]

# Configuration versioning constants
CURRENT_CONFIG_VERSION = "1"
MIN_SUPPORTED_VERSION = "1"

DEFAULT_CONFIG_FILENAME = ".jsonguard.yaml"
DEFAULT_LOG_FORMAT = "%(asctime)s %(filename)s:%(lineno)d: %(message)s"

_DIFF_FILTER_LETTERS = set("ACDMRTUXB")


class CheckConfig(BaseModel):
    """Settings for a check run.

    Every field has a default, so running without a configuration file
    reproduces the stock pre-commit behaviour. Values can be loaded from
    YAML with snake_case or kebab-case keys.
    """

    model_config = ConfigDict(extra="forbid")

    config_version: str = Field(
        default=CURRENT_CONFIG_VERSION, description="Configuration schema version"
    )
    window_size: int = Field(
        default=4096,
        description="Bytes read around a parse error to build the context window",
        ge=64,
        le=1024 * 1024,
    )
    leading_lines: int = Field(default=3, description="Context lines before the error", ge=1)
    trailing_lines: int = Field(default=2, description="Context lines after the error", ge=1)
    workers: Optional[int] = Field(
        default=None,
        description="Maximum concurrent validations (unbounded when unset)",
        ge=1,
        le=1024,
    )
    against: str = Field(default="HEAD", description="Tree-ish the index is compared with")
    diff_filter: str = Field(default="ACdMRTUXB", description="git --diff-filter letters")
    log_format: str = Field(default=DEFAULT_LOG_FORMAT, description="logging format string")
    metrics_file: Optional[str] = Field(
        default=None, description="Write Prometheus textfile metrics to this path"
    )

    @field_validator("against")
    @classmethod
    def validate_against(cls, v: str) -> str:
        v = v.strip()
        if not v or v.startswith("-"):
            raise ValueError(f"Invalid revision: {v!r}")
        return v

    @field_validator("diff_filter")
    @classmethod
    def validate_diff_filter(cls, v: str) -> str:
        """Only accept letters git understands for --diff-filter."""
        if not v:
            raise ValueError("diff_filter cannot be empty")
        unknown = set(v.upper()) - _DIFF_FILTER_LETTERS
        if unknown:
            raise ValueError(
                f"Unknown diff filter letters: {''.join(sorted(unknown))}. "
                f"Valid letters: {''.join(sorted(_DIFF_FILTER_LETTERS))}"
            )
        return v

    @classmethod
    def from_yaml(cls, path: PathLike) -> CheckConfig:
        """Load configuration from a YAML file.

        Delegates to ``jsonguard.config.loader.load_config``.
        """
        from .loader import load_config

        return load_config(path)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()

    def merge_overrides(self, **overrides: Any) -> CheckConfig:
        """Create a new config with field overrides.

        Args:
            **overrides: Field values to override; ``None`` values are ignored

        Returns:
            New CheckConfig instance with overrides applied
        """
        current_data = self.to_dict()

        for key, value in overrides.items():
            if value is not None:
                current_data[key] = value

        return self.__class__(**current_data)
