# SPDX-License-Identifier: Apache-2.0
"""Prometheus metrics for check runs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, write_to_textfile

PathLike = Union[str, Path]

logger = logging.getLogger(__name__)

REGISTRY = CollectorRegistry(auto_describe=True)

FILES_CHECKED = Counter(
    "jsonguard_files_checked_total", "JSON files validated", registry=REGISTRY
)
FILES_INVALID = Counter(
    "jsonguard_files_invalid_total", "JSON files that failed to parse", registry=REGISTRY
)
VALIDATION_LATENCY = Histogram(
    "jsonguard_validation_seconds",
    "Time spent validating a single file",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1, 5],
    registry=REGISTRY,
)
INFLIGHT = Gauge(
    "jsonguard_inflight_validations", "Validations currently running", registry=REGISTRY
)

__all__ = [
    "REGISTRY",
    "FILES_CHECKED",
    "FILES_INVALID",
    "VALIDATION_LATENCY",
    "INFLIGHT",
    "export_textfile",
]


def export_textfile(path: PathLike) -> None:
    """Write the current metric values in the node-exporter textfile format."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    write_to_textfile(str(target), REGISTRY)
    logger.debug("Wrote metrics to %s", target)
