# SPDX-License-Identifier: Apache-2.0
"""jsonguard: reject commits that stage malformed JSON."""

from .coordinator import CheckCoordinator, is_candidate
from .errors import FatalCheckError
from .validator import FileValidator, ParseOutcome
from .window import extract_window

__version__ = "0.1.0"

__all__ = [
    "CheckCoordinator",
    "FileValidator",
    "ParseOutcome",
    "FatalCheckError",
    "extract_window",
    "is_candidate",
    "__version__",
]
