"""
Custom Exceptions Module.

This module defines the exceptions raised by the invoice ledger. Only
input loading and the extraction boundary raise; row-level and total-level
inconsistencies are reported as values, never as exceptions.

Exception Hierarchy:
    InvoiceLedgerError (base)
    ├── InputError
    │   ├── UnsupportedFileTypeError
    │   ├── InputFileNotFoundError
    │   └── PriceBookReadError
    └── ExtractionError
        ├── MissingCredentialError
        ├── ExtractionServiceError
        └── MalformedResponseError
"""


class InvoiceLedgerError(Exception):
    """
    Base exception for all invoice ledger errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(InvoiceLedgerError):
    """Base exception for input handling errors."""
    pass


class UnsupportedFileTypeError(InputError):
    """
    Raised when an unsupported invoice document type is provided.

    Example:
        >>> raise UnsupportedFileTypeError(".doc", [".pdf", ".jpg"])
    """

    def __init__(self, file_type: str, supported_types: list):
        message = f"Unsupported file type: '{file_type}'"
        details = {"file_type": file_type, "supported_types": supported_types}
        super().__init__(message, details)


class InputFileNotFoundError(InputError):
    """Raised when an input file cannot be found."""

    def __init__(self, filepath: str):
        message = f"File not found: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


class PriceBookReadError(InputError):
    """Raised when the optional price book cannot be read."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Could not read price book: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# EXTRACTION ERRORS
# =============================================================================

class ExtractionError(InvoiceLedgerError):
    """Base exception for extraction service failures."""
    pass


class MissingCredentialError(ExtractionError):
    """Raised when no API key is configured for the extraction service."""

    def __init__(self, env_var: str):
        message = (
            "API Key is missing. Please check your environment configuration."
        )
        details = {"env_var": env_var}
        super().__init__(message, details)


class ExtractionServiceError(ExtractionError):
    """Raised when the extraction service is unreachable or rejects a request."""

    def __init__(self, reason: str, status_code: int = None):
        message = "Extraction service request failed"
        details = {"reason": reason}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)


class MalformedResponseError(ExtractionError):
    """Raised when the service answers with an empty or unusable body."""

    def __init__(self, reason: str):
        message = "Invalid JSON structure received from extraction service"
        details = {"reason": reason}
        super().__init__(message, details)


__all__ = [
    'InvoiceLedgerError',
    'InputError',
    'UnsupportedFileTypeError',
    'InputFileNotFoundError',
    'PriceBookReadError',
    'ExtractionError',
    'MissingCredentialError',
    'ExtractionServiceError',
    'MalformedResponseError',
]
