"""
Utility functions and helpers.
"""

from repobootstrap.utils.logging_config import setup_logging, get_logger
from repobootstrap.utils.validation import (
    parse_extra_dependencies,
    validate_remote,
    validate_repository_name,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "parse_extra_dependencies",
    "validate_remote",
    "validate_repository_name",
]
