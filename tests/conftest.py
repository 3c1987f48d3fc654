"""Shared test fixtures for pytest.

ENVIRONMENT is forced to "test" before any settings are built so no env
file is read, and real model requests are blocked for the whole session.
"""

import asyncio
import os
from collections.abc import Generator

import pytest
from pydantic_ai import models


os.environ["ENVIRONMENT"] = "test"
os.environ.pop("GEMINI_API_KEY", None)
os.environ.pop("API_KEY", None)

# Block any real model requests in tests
models.ALLOW_MODEL_REQUESTS = False

from qc_extractor.core.config import get_settings
from qc_extractor.schemas.quality import ExtractedRecord
from qc_extractor.services.ai.exceptions import ExtractionBackendError


SAMPLE_TEXT = (
    "名称：123，件号：ABC，是否客服返修件：新品，供应商名称：XH，"
    "问题点：划伤，不良批次：647，不良数量：1"
)


def make_record(**overrides: str) -> ExtractedRecord:
    data = {
        "name": "123",
        "partNumber": "ABC",
        "isCustomerReturn": "新品",
        "supplierName": "XH",
        "problemPoint": "划伤",
        "defectBatch": "647",
        "defectQuantity": "1",
    }
    data.update(overrides)
    return ExtractedRecord.model_validate(data)


class FakeExtractor:
    """In-memory extractor keyed by fragment text.

    Texts mapped to an exception instance raise it; unknown texts raise
    `ExtractionBackendError`. Each call yields to the event loop so that
    concurrent calls overlap, and the peak overlap is recorded.
    """

    def __init__(
        self,
        responses: dict[str, ExtractedRecord | Exception] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.responses = responses or {}
        self.delays = delays or {}
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def extract(self, text: str) -> ExtractedRecord:
        self.calls.append(text)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(text, 0.01))
            response = self.responses.get(text)
            if response is None:
                raise ExtractionBackendError()
            if isinstance(response, Exception):
                raise response
            return response
        finally:
            self.in_flight -= 1


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_record() -> ExtractedRecord:
    return make_record()


@pytest.fixture
def fake_extractor() -> FakeExtractor:
    return FakeExtractor()
