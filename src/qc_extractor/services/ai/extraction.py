"""Gemini-backed extraction client for quality defect reports."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import ValidationError
from pydantic_ai import UnexpectedModelBehavior

from qc_extractor.core.structured_logging import StructuredLogger
from qc_extractor.schemas.quality import ExtractedRecord
from qc_extractor.services.ai.agents import build_user_prompt, create_extraction_agent
from qc_extractor.services.ai.exceptions import (
    ExtractionBackendError,
    ExtractionParseError,
)
from qc_extractor.services.ai.interfaces import ExtractionAgentProtocol


logger = StructuredLogger(__name__)


class ExtractionClient:
    """Send one fragment to the extraction backend and return its record.

    The agent is created lazily on the first call, so a missing API key
    surfaces as an `ExtractionBackendError` on every call instead of
    failing at construction time.
    """

    def __init__(
        self,
        agent: ExtractionAgentProtocol | None = None,
        agent_factory: Callable[[], ExtractionAgentProtocol] = create_extraction_agent,
    ) -> None:
        self._agent = agent
        self._agent_factory = agent_factory

    def _get_agent(self) -> ExtractionAgentProtocol:
        if self._agent is None:  # Lazy creation
            try:
                self._agent = self._agent_factory()
            except Exception as e:  # noqa: BLE001
                logger.error(
                    "Extraction agent could not be created",
                    exception_type=e.__class__.__name__,
                    error=str(e),
                )
                raise ExtractionBackendError(
                    f"Extraction backend unavailable: {e}"
                ) from e
        return self._agent

    async def extract(self, text: str) -> ExtractedRecord:
        """Extract the seven quality fields from *text*.

        Raises:
            ExtractionBackendError: The backend call failed or returned nothing.
            ExtractionParseError: The reply did not match the record contract.
        """
        agent = self._get_agent()
        logger.debug("Running extraction", text_length=len(text))

        try:
            result: Any = await agent.run(build_user_prompt(text))
        except UnexpectedModelBehavior as e:
            # Reply arrived but failed JSON parsing or schema validation
            logger.error(
                "Extraction reply did not match the record schema",
                body_length=len(e.body or ""),
                detail=e.message,
            )
            raise ExtractionParseError() from e
        except Exception as e:  # noqa: BLE001
            logger.error(
                "Extraction backend call failed",
                exception_type=e.__class__.__name__,
                error=str(e),
            )
            raise ExtractionBackendError() from e

        output = getattr(result, "output", None)
        if output is None:
            logger.error("Extraction backend returned an empty response")
            raise ExtractionBackendError(
                "Failed to get response from AI", error_code="empty_response"
            )

        return self._coerce_record(output)

    @staticmethod
    def _coerce_record(output: Any) -> ExtractedRecord:
        """Normalize the agent output into an `ExtractedRecord`."""
        if isinstance(output, ExtractedRecord):
            return output
        try:
            if isinstance(output, str | bytes):
                return ExtractedRecord.model_validate_json(output)
            return ExtractedRecord.model_validate(output)
        except ValidationError as e:
            logger.error(
                "Extraction reply did not match the record schema",
                body_length=len(output) if isinstance(output, str | bytes) else 0,
                error_count=e.error_count(),
            )
            raise ExtractionParseError() from e
