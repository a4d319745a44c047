"""
CodePulse - Response Parser.

Turns raw service text into a validated JSON value. Rejects malformed
output early so the retry controller can try again.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from codepulse.core.exceptions import (
    EmptyResponseError,
    JsonSyntaxError,
    MalformedFormatError,
)
from codepulse.core.schemas import SchemaDescriptor


logger = logging.getLogger(__name__)


def parse_and_validate(raw_text: str | None, schema: SchemaDescriptor) -> Any:
    """
    Parse a structured response and check it against its schema.

    Args:
        raw_text: Text returned by the service, claimed to be JSON
        schema: Expected output shape

    Returns:
        The parsed JSON value, unchanged

    Raises:
        EmptyResponseError: If the text is empty or whitespace
        MalformedFormatError: If the text does not start with '{' or '['
        JsonSyntaxError: If the text is not valid JSON
        SchemaViolationError: If a required field is missing or mistyped
    """
    if raw_text is None or not raw_text.strip():
        raise EmptyResponseError()

    json_text = raw_text.strip()

    # Cheap structural check before a full parse
    if not json_text.startswith(("{", "[")):
        raise MalformedFormatError()

    try:
        data = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise JsonSyntaxError("Invalid JSON in AI response", details=str(e)) from e

    schema.validate(data)

    logger.debug(f"Parsed {schema.name} response ({len(json_text)} chars)")
    return data
