"""Service interfaces for AI extraction functionality.

Protocols let the fragment store and tests swap the real Gemini-backed
client for fakes without patching module globals.
"""

from __future__ import annotations

from typing import Any, Protocol

from qc_extractor.schemas.quality import ExtractedRecord


class ExtractorProtocol(Protocol):
    """Anything that turns one fragment text into a record."""

    async def extract(self, text: str) -> ExtractedRecord:
        """Extract a record or raise `ExtractionError`."""
        ...


class ExtractionAgentProtocol(Protocol):
    """The slice of `pydantic_ai.Agent` the client relies on."""

    async def run(self, user_prompt: str) -> Any:  # noqa: ANN401 (external lib returns Any)
        ...
