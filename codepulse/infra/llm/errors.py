"""
CodePulse - Error Classifier.

Maps arbitrary failures (network, auth, quota, safety filters, malformed
responses) onto a small set of user-facing categories with stable
messages. The classifier never raises.
"""

from __future__ import annotations

import logging

from codepulse.core.domain.models import ErrorCategory
from codepulse.core.exceptions import ClassifiedError, MissingAPIKeyError


logger = logging.getLogger(__name__)


ERROR_MESSAGES: dict[ErrorCategory, str] = {
    ErrorCategory.INVALID_CREDENTIAL: "Invalid API key. Please check your Google AI API key configuration.",
    ErrorCategory.QUOTA_EXCEEDED: "API quota exceeded. Please try again later or check your billing status.",
    ErrorCategory.INVALID_REQUEST: "Invalid request. Please check your input and try again.",
    ErrorCategory.SERVICE_UNAVAILABLE: "AI service temporarily unavailable. Please try again later.",
    ErrorCategory.CONTENT_BLOCKED: "Request blocked by safety filters. Please modify your input.",
    ErrorCategory.GENERIC_UNAVAILABLE: "The AI is currently unavailable. Please try again in a moment.",
}

# First match wins
_RULES: list[tuple[tuple[str, ...], ErrorCategory]] = [
    (("api key not valid",), ErrorCategory.INVALID_CREDENTIAL),
    (("quota", "429"), ErrorCategory.QUOTA_EXCEEDED),
    (("400",), ErrorCategory.INVALID_REQUEST),
    (("500", "503"), ErrorCategory.SERVICE_UNAVAILABLE),
    (("safety",), ErrorCategory.CONTENT_BLOCKED),
]


def classify(error: BaseException | None, context: str = "") -> ClassifiedError:
    """
    Convert any failure into a displayable ClassifiedError.

    Args:
        error: The underlying failure (may be None)
        context: Where the failure happened, for the diagnostic log

    Returns:
        A ClassifiedError; an already classified error is returned as-is
    """
    if isinstance(error, ClassifiedError):
        return error

    if context:
        logger.error(f"Error in {context}: {error!r}")
    else:
        logger.error(f"AI service error: {error!r}")

    if isinstance(error, MissingAPIKeyError):
        return _build(ErrorCategory.INVALID_CREDENTIAL, error)

    text = str(error) if error is not None else ""
    if not text:
        return _build(ErrorCategory.GENERIC_UNAVAILABLE, error)

    lowered = text.lower()
    for needles, category in _RULES:
        if any(needle in lowered for needle in needles):
            return _build(category, error)

    return ClassifiedError(
        ErrorCategory.UNEXPECTED,
        f"Unexpected error: {text}",
        cause=error,
    )


def _build(category: ErrorCategory, error: BaseException | None) -> ClassifiedError:
    return ClassifiedError(category, ERROR_MESSAGES[category], cause=error)
