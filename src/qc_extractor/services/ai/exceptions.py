"""Domain exceptions for the AI extraction client.

Callers only need to catch `ExtractionError`; the two subclasses exist so
logs and analytics can tell a backend failure from a reply that did not
match the seven-field contract. Each exception carries a stable
`error_code`.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class AIExtractionError(Exception):
    """Base class for AI extraction domain errors."""

    message: str
    error_code: str

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.error_code}: {self.message}"


class ExtractionError(AIExtractionError):
    def __init__(
        self,
        message: str = "Failed to extract quality data",
        error_code: str = "extraction_failed",
    ) -> None:
        super().__init__(message=message, error_code=error_code)


class ExtractionBackendError(ExtractionError):
    def __init__(
        self,
        message: str = "Failed to get response from AI",
        error_code: str = "backend_failed",
    ) -> None:
        super().__init__(message=message, error_code=error_code)


class ExtractionParseError(ExtractionError):
    def __init__(self, message: str = "AI 返回格式错误") -> None:
        super().__init__(message=message, error_code="invalid_response")
