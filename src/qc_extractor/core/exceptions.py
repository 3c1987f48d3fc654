class DomainError(Exception):
    """Base class for domain-specific errors."""

    pass


class ExportValidationError(DomainError):
    """Raised when an export is requested with no extracted records."""

    def __init__(self, message: str = "No data to export!") -> None:
        super().__init__(message)
        self.message = message
