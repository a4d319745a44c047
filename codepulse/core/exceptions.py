"""
CodePulse - Custom Exceptions.

Defines a hierarchy of domain-specific exceptions for clean error handling.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from codepulse.core.domain.models import ErrorCategory


class CodePulseError(Exception):
    """Base exception for all CodePulse errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


# -----------------------------------------------------------------------------
# Configuration Errors
# -----------------------------------------------------------------------------

class ConfigurationError(CodePulseError):
    """Raised when configuration is invalid or missing."""
    pass


class MissingAPIKeyError(ConfigurationError):
    """Raised when a required API key is missing."""

    def __init__(self, key_name: str):
        super().__init__(
            message=f"Missing required API key: {key_name}",
            details="Please set this in your .env file or environment variables",
        )


# -----------------------------------------------------------------------------
# Input Errors
# -----------------------------------------------------------------------------

class InputError(CodePulseError):
    """Base exception for invalid user input."""
    pass


class MissingInputError(InputError):
    """Raised when a required input is blank, before any network call."""

    def __init__(self, *field_names: str):
        self.field_names = field_names
        if len(field_names) == 1:
            message = f"{field_names[0]} is required"
        else:
            message = f"{', '.join(field_names[:-1])} and {field_names[-1]} are required"
        super().__init__(message=message[0].upper() + message[1:])


# -----------------------------------------------------------------------------
# Document Errors
# -----------------------------------------------------------------------------

class DocumentError(InputError):
    """Base exception for uploaded document errors."""
    pass


class PDFParseError(DocumentError):
    """Raised when a resume PDF cannot be read."""

    def __init__(self, source: str, reason: str):
        self.source = source
        super().__init__(
            message=f"Could not read PDF: {source}",
            details=reason,
        )


class EmptyDocumentError(DocumentError):
    """Raised when a document has no extractable text."""

    def __init__(self, source: str):
        self.source = source
        super().__init__(
            message="No extractable text found",
            details=f"{source} may be a scanned image; paste the resume text instead",
        )


# -----------------------------------------------------------------------------
# LLM Errors
# -----------------------------------------------------------------------------

class LLMError(CodePulseError):
    """Base exception for LLM-related errors."""
    pass


class LLMTimeoutError(LLMError):
    """Raised when a single generation attempt exceeds its time budget."""

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(
            message="Request to the AI service timed out",
            details=f"No response within {timeout_seconds:g}s",
        )


class LLMResponseError(LLMError):
    """Raised when the LLM returns an invalid or blocked response."""
    pass


class EmptyResponseError(LLMResponseError):
    """Raised when the service returns no text at all."""

    def __init__(self, message: str = "Empty response from AI service"):
        super().__init__(message)


class MalformedFormatError(LLMResponseError):
    """Raised when the response does not even look like JSON."""

    def __init__(self, message: str = "Invalid JSON response format"):
        super().__init__(message)


class JsonSyntaxError(LLMResponseError):
    """Raised when the response looks like JSON but fails to parse."""
    pass


class SchemaViolationError(LLMResponseError):
    """Raised when parsed JSON does not match the expected schema."""

    def __init__(self, schema_name: str, field_path: str, reason: str):
        self.schema_name = schema_name
        self.field_path = field_path
        super().__init__(
            message=f"Response does not match {schema_name} schema",
            details=f"{field_path}: {reason}",
        )


# -----------------------------------------------------------------------------
# User-Facing Errors
# -----------------------------------------------------------------------------

class ClassifiedError(CodePulseError):
    """
    A failure mapped to a stable, displayable category.

    The message is safe to show to the end user; the original
    exception is kept on ``cause`` for diagnostics.
    """

    def __init__(
        self,
        category: ErrorCategory,
        message: str,
        cause: BaseException | None = None,
    ):
        self.category = category
        self.cause = cause
        super().__init__(message=message)


# -----------------------------------------------------------------------------
# Chat Session Errors
# -----------------------------------------------------------------------------

class ChatError(CodePulseError):
    """Base exception for chat session errors."""
    pass


class InvalidChatStateError(ChatError):
    """Raised when an operation is invalid for the current chat state."""

    def __init__(self, current_state: str, required_state: str):
        super().__init__(
            message="Invalid chat state",
            details=f"Current: {current_state}, Required: {required_state}",
        )
