"""
CodePulse - Gemini Client Adapter.

Thin wrapper over the Google Gemini API exposing the three capabilities
the application needs: schema-constrained JSON generation, search-grounded
generation, and streaming chat sessions.

The client handle is created lazily on first use so a missing API key is
reported when a generation is attempted, not at import time.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, AsyncIterator

import google.generativeai as genai
from google import genai as google_genai
from google.genai import types as genai_types

from codepulse.core.config import get_settings
from codepulse.core.domain.models import GroundingSource, SamplingConfig
from codepulse.core.exceptions import LLMResponseError, MissingAPIKeyError


logger = logging.getLogger(__name__)


@dataclass
class GroundedResponse:
    """Free text plus the web sources the service cited."""

    text: str
    sources: list[GroundingSource] = field(default_factory=list)


class GeminiClient:
    """
    Process-wide Gemini handle.

    Holds no per-call state, so one instance can serve any number of
    concurrent operations.
    """

    def __init__(self, api_key: str | None = None, model_name: str | None = None):
        settings = get_settings()
        self._api_key = api_key or settings.api_key
        self._model_name = model_name or settings.GEMINI_MODEL

        if not self._api_key:
            raise MissingAPIKeyError("GEMINI_API_KEY")

        genai.configure(api_key=self._api_key)
        self._search_client: google_genai.Client | None = None
        logger.info(f"✅ Gemini API configured (model={self._model_name})")

    @property
    def model_name(self) -> str:
        return self._model_name

    async def structured_generate(
        self,
        prompt: str,
        response_schema: dict[str, Any],
        sampling: SamplingConfig,
    ) -> str:
        """Request JSON output conforming to ``response_schema``; return the raw text."""
        model = genai.GenerativeModel(self._model_name)
        generation_config = genai.GenerationConfig(
            response_mime_type="application/json",
            response_schema=response_schema,
            temperature=sampling.temperature,
            top_p=sampling.top_p,
            top_k=sampling.top_k,
        )

        response = await model.generate_content_async(
            prompt,
            generation_config=generation_config,
        )
        return _response_text(response)

    async def grounded_generate(self, prompt: str, sampling: SamplingConfig) -> GroundedResponse:
        """
        Generate free text with Google Search grounding enabled.

        Gemini 2.x models only accept the ``google_search`` tool, which the
        legacy SDK cannot express, so this call goes through google-genai.
        """
        config = genai_types.GenerateContentConfig(
            temperature=sampling.temperature,
            tools=[genai_types.Tool(google_search=genai_types.GoogleSearch())],
        )

        response = await self._grounding_client().aio.models.generate_content(
            model=self._model_name,
            contents=prompt,
            config=config,
        )
        return GroundedResponse(
            text=_response_text(response),
            sources=_grounding_sources(response),
        )

    def _grounding_client(self) -> google_genai.Client:
        if self._search_client is None:
            self._search_client = google_genai.Client(api_key=self._api_key)
        return self._search_client

    def open_chat_session(
        self,
        system_instruction: str,
        model_name: str | None = None,
    ) -> GeminiChatHandle:
        """Open a conversation bound to ``system_instruction``."""
        model = genai.GenerativeModel(
            model_name or self._model_name,
            system_instruction=system_instruction,
        )
        return GeminiChatHandle(model)


class GeminiChatHandle:
    """
    One conversation with the service.

    History is kept here and an exchange is committed only after its
    response has streamed to completion, so a failed turn can be resent
    without leaving half an exchange behind.
    """

    def __init__(self, model: genai.GenerativeModel):
        self._model = model
        self._history: list[dict[str, Any]] = []

    @property
    def history(self) -> list[dict[str, Any]]:
        return list(self._history)

    async def send_streaming(self, message: str) -> AsyncIterator[str]:
        """Send ``message`` and yield the reply as it arrives."""
        user_turn = {"role": "user", "parts": [message]}

        try:
            response = await self._model.generate_content_async(
                self._history + [user_turn],
                stream=True,
            )
        except genai.types.BlockedPromptException as e:
            logger.warning(f"Prompt blocked: {e}")
            raise LLMResponseError("Content was blocked by safety filters") from e

        fragments: list[str] = []
        async for chunk in response:
            text = _response_text(chunk)
            if text:
                fragments.append(text)
                yield text

        self._history.append(user_turn)
        self._history.append({"role": "model", "parts": ["".join(fragments)]})


# -----------------------------------------------------------------------------
# Response Helpers
# -----------------------------------------------------------------------------

def _response_text(response: Any) -> str:
    """Extract text, mapping safety blocks to an error and empty output to ''."""
    feedback = getattr(response, "prompt_feedback", None)
    if feedback is not None and getattr(feedback, "block_reason", None):
        raise LLMResponseError("Content was blocked by safety filters", details=str(feedback.block_reason))

    try:
        return response.text or ""
    except ValueError as e:
        # Raised by the SDK when a candidate carries no text parts
        candidates = getattr(response, "candidates", None) or []
        finish_reason = getattr(candidates[0], "finish_reason", None) if candidates else None
        if finish_reason is not None and "SAFETY" in str(getattr(finish_reason, "name", finish_reason)):
            raise LLMResponseError("Response blocked by safety filters") from e
        return ""


def _grounding_sources(response: Any) -> list[GroundingSource]:
    """Collect cited web sources; entries may have empty fields."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []

    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    sources = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        sources.append(
            GroundingSource(
                uri=getattr(web, "uri", "") or "",
                title=getattr(web, "title", "") or "",
            )
        )
    return sources


# -----------------------------------------------------------------------------
# Lazy Client Factory
# -----------------------------------------------------------------------------

_client: GeminiClient | None = None
_client_lock = threading.Lock()


def get_client() -> GeminiClient:
    """
    Return the shared client, creating it on first use.

    Raises:
        MissingAPIKeyError: If no API key is configured
    """
    global _client
    if _client is None:
        with _client_lock:
            if _client is None:
                _client = GeminiClient()
    return _client


def reset_client() -> None:
    """Drop the shared client so the next call rebuilds it from settings."""
    global _client
    with _client_lock:
        _client = None
