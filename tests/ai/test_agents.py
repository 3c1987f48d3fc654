"""Tests for the extraction agent factory and the Gemini model factory."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from pydantic_ai import Agent
from pydantic_ai.models.test import TestModel

from qc_extractor.services.ai.agents import (
    QUALITY_EXTRACTION_PROMPT,
    build_user_prompt,
    create_extraction_agent,
)


def test_system_prompt_names_every_field():
    for wire_name in (
        "name",
        "partNumber",
        "isCustomerReturn",
        "supplierName",
        "problemPoint",
        "defectBatch",
        "defectQuantity",
    ):
        assert f"({wire_name})" in QUALITY_EXTRACTION_PROMPT
    assert "新品" in QUALITY_EXTRACTION_PROMPT
    assert "返修件" in QUALITY_EXTRACTION_PROMPT
    assert "Markdown" in QUALITY_EXTRACTION_PROMPT


def test_build_user_prompt_keeps_text_verbatim():
    assert build_user_prompt("a {b} c") == '请从以下文本中提取信息： "a {b} c"'


@patch("qc_extractor.services.ai.agents.get_extraction_model")
def test_create_extraction_agent_uses_model_factory(mock_get_model: MagicMock):
    mock_get_model.return_value = TestModel()

    agent = create_extraction_agent()

    assert isinstance(agent, Agent)
    mock_get_model.assert_called_once()


class TestGetExtractionModel:
    @patch("qc_extractor.services.ai.model_factory.get_settings")
    def test_raises_without_api_key(self, mock_settings: MagicMock) -> None:
        mock_settings.return_value.GEMINI_API_KEY = None

        from qc_extractor.services.ai.model_factory import get_extraction_model

        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            get_extraction_model()

    @patch("qc_extractor.services.ai.model_factory.GoogleModel")
    @patch("qc_extractor.services.ai.model_factory.GoogleProvider")
    @patch("qc_extractor.services.ai.model_factory.get_settings")
    def test_builds_gemini_model_from_settings(
        self,
        mock_settings: MagicMock,
        mock_provider: MagicMock,
        mock_model: MagicMock,
    ) -> None:
        mock_settings.return_value.GEMINI_API_KEY = "test-key"
        mock_settings.return_value.EXTRACTION_MODEL = "gemini-3-flash-preview"

        from qc_extractor.services.ai.model_factory import get_extraction_model

        model = get_extraction_model()

        mock_provider.assert_called_once_with(api_key="test-key", http_client=None)
        mock_model.assert_called_once_with(
            "gemini-3-flash-preview", provider=mock_provider.return_value
        )
        assert model is mock_model.return_value

    @patch("qc_extractor.services.ai.model_factory.get_settings")
    def test_logs_warning_on_missing_key(
        self, mock_settings: MagicMock, caplog: pytest.LogCaptureFixture
    ) -> None:
        mock_settings.return_value.GEMINI_API_KEY = ""

        from qc_extractor.services.ai.model_factory import (
            _validate_gemini_credentials,
        )

        assert _validate_gemini_credentials() is False
        assert "Gemini API key not configured" in caplog.text
