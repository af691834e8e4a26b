"""
Utility modules for the accessibility auditor.

Contains logging and shared constants.
"""

from .log import setup_logger, get_logger
from .constants import (
    DEFAULT_USER_AGENT,
    DEFAULT_TIMEOUT,
    DEFAULT_PAGE_TIMEOUT,
    DEFAULT_IGNORE_FILE,
    MAX_ANCESTOR_DEPTH,
    MAX_SNAPSHOT_NODES,
    MAX_IGNORE_RULES,
    MAX_SPACING_TARGETS,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "DEFAULT_USER_AGENT",
    "DEFAULT_TIMEOUT",
    "DEFAULT_PAGE_TIMEOUT",
    "DEFAULT_IGNORE_FILE",
    "MAX_ANCESTOR_DEPTH",
    "MAX_SNAPSHOT_NODES",
    "MAX_IGNORE_RULES",
    "MAX_SPACING_TARGETS",
]
