"""Init file for AI services."""

from .agents import create_extraction_agent
from .exceptions import ExtractionBackendError, ExtractionError, ExtractionParseError
from .extraction import ExtractionClient


__all__ = [
    "create_extraction_agent",
    "ExtractionClient",
    "ExtractionError",
    "ExtractionBackendError",
    "ExtractionParseError",
]
