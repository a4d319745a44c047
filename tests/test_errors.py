"""
Unit tests for the Error Classifier.
"""

import pytest

from codepulse.core.domain.models import ErrorCategory
from codepulse.core.exceptions import (
    ClassifiedError,
    EmptyResponseError,
    LLMResponseError,
    MissingAPIKeyError,
)
from codepulse.infra.llm.errors import ERROR_MESSAGES, classify


class TestClassify:
    """Test suite for classify()."""

    @pytest.mark.parametrize("text, category", [
        ("400 API key not valid. Please pass a valid API key.", ErrorCategory.INVALID_CREDENTIAL),
        ("429 Resource has been exhausted", ErrorCategory.QUOTA_EXCEEDED),
        ("You exceeded your current Quota", ErrorCategory.QUOTA_EXCEEDED),
        ("400 Request contains an invalid argument.", ErrorCategory.INVALID_REQUEST),
        ("500 Internal error encountered.", ErrorCategory.SERVICE_UNAVAILABLE),
        ("503 The model is overloaded.", ErrorCategory.SERVICE_UNAVAILABLE),
        ("Response blocked: Safety", ErrorCategory.CONTENT_BLOCKED),
    ])
    def test_policy_table(self, text, category):
        """Each rule maps to its category and fixed message."""
        result = classify(Exception(text))

        assert result.category is category
        assert result.message == ERROR_MESSAGES[category]

    def test_first_match_wins(self):
        """A credential error carrying a 400 status is still a credential error."""
        result = classify(Exception("400 API key not valid"))

        assert result.category is ErrorCategory.INVALID_CREDENTIAL

    def test_unknown_error_keeps_original_text(self):
        result = classify(RuntimeError("connection reset by peer"))

        assert result.category is ErrorCategory.UNEXPECTED
        assert result.message == "Unexpected error: connection reset by peer"

    def test_error_without_message_is_generic(self):
        result = classify(Exception())

        assert result.category is ErrorCategory.GENERIC_UNAVAILABLE
        assert result.message == "The AI is currently unavailable. Please try again in a moment."

    def test_none_is_generic(self):
        assert classify(None).category is ErrorCategory.GENERIC_UNAVAILABLE

    def test_missing_api_key_is_invalid_credential(self):
        result = classify(MissingAPIKeyError("GEMINI_API_KEY"))

        assert result.category is ErrorCategory.INVALID_CREDENTIAL

    def test_safety_block_from_client(self):
        result = classify(LLMResponseError("Content was blocked by safety filters"))

        assert result.category is ErrorCategory.CONTENT_BLOCKED

    def test_empty_response_is_unexpected(self):
        result = classify(EmptyResponseError())

        assert result.category is ErrorCategory.UNEXPECTED
        assert "Empty response from AI service" in result.message

    def test_keeps_cause(self):
        error = Exception("503 unavailable")

        assert classify(error).cause is error

    def test_classified_error_passes_through(self):
        original = ClassifiedError(ErrorCategory.QUOTA_EXCEEDED, "custom")

        assert classify(original) is original

    def test_logs_raw_error_with_context(self, caplog):
        with caplog.at_level("ERROR"):
            classify(Exception("500 boom"), "questions")

        assert "Error in questions" in caplog.text
        assert "500 boom" in caplog.text


# =============================================================================
# Run tests
# =============================================================================

if __name__ == "__main__":
    pytest.main([__file__, "-v"])
