"""Core utilities: constants, logging, exceptions."""

from narrative.core.exceptions import NarrativeError
from narrative.core.logging import get_logger, setup_logging

__all__ = [
    "NarrativeError",
    "get_logger",
    "setup_logging",
]
