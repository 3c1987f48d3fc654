"""Model factory for the extraction backend.

Usage:
    from qc_extractor.services.ai.model_factory import get_extraction_model

    model = get_extraction_model()  # Returns pydantic-ai Model
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

from pydantic_ai.models import Model
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.providers.google import GoogleProvider

from qc_extractor.core.config import get_settings


if TYPE_CHECKING:
    from httpx import AsyncClient

logger = logging.getLogger(__name__)


def _validate_gemini_credentials() -> bool:
    """Validate that Gemini API key is configured."""
    settings = get_settings()
    if not settings.GEMINI_API_KEY:
        logger.warning("Gemini API key not configured")
        return False
    return True


def get_extraction_model(http_client: AsyncClient | None = None) -> Model:
    """Get the Gemini model used for quality-data extraction.

    Args:
        http_client: Optional HTTP client shared across requests.

    Returns:
        A pydantic-ai Model for the configured extraction model name.

    Raises:
        ValueError: If no Gemini API key is configured.
    """
    settings = get_settings()

    if not _validate_gemini_credentials():
        raise ValueError(
            "No valid LLM provider configured. Set GEMINI_API_KEY (or API_KEY)."
        )

    logger.info("Using Gemini extraction model: %s", settings.EXTRACTION_MODEL)
    provider = GoogleProvider(
        api_key=settings.GEMINI_API_KEY,
        http_client=http_client,
    )
    return cast(Model, GoogleModel(settings.EXTRACTION_MODEL, provider=provider))
