"""
Unit tests for the Gemini client adapter.

The SDK is never called; response objects are stood in by simple
namespaces with the attributes the adapter reads.
"""

from types import SimpleNamespace

import pytest

from codepulse.core.domain.models import SamplingConfig
from codepulse.core.exceptions import LLMResponseError, MissingAPIKeyError
from codepulse.infra.llm import gemini
from codepulse.infra.llm.gemini import GeminiChatHandle, _grounding_sources, _response_text


class NoTextResponse:
    """Mimics an SDK response whose .text accessor raises."""

    def __init__(self, finish_reason):
        self.prompt_feedback = None
        self.candidates = [SimpleNamespace(finish_reason=SimpleNamespace(name=finish_reason))]

    @property
    def text(self):
        raise ValueError("No text parts")


class FakeStream:
    def __init__(self, chunks):
        self.chunks = chunks

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for chunk in self.chunks:
            if isinstance(chunk, BaseException):
                raise chunk
            yield SimpleNamespace(text=chunk, prompt_feedback=None)


class FakeModel:
    def __init__(self, replies):
        self.replies = list(replies)
        self.requests = []

    async def generate_content_async(self, contents, stream=False):
        self.requests.append(list(contents))
        return FakeStream(self.replies.pop(0))


class TestResponseText:
    """Test suite for _response_text()."""

    def test_returns_text(self):
        assert _response_text(SimpleNamespace(text='{"a": 1}', prompt_feedback=None)) == '{"a": 1}'

    def test_blocked_prompt_raises_safety_error(self):
        response = SimpleNamespace(text="", prompt_feedback=SimpleNamespace(block_reason="SAFETY"))

        with pytest.raises(LLMResponseError) as exc_info:
            _response_text(response)

        assert "safety" in str(exc_info.value)

    def test_safety_finish_raises(self):
        with pytest.raises(LLMResponseError):
            _response_text(NoTextResponse("SAFETY"))

    def test_other_empty_finish_returns_empty(self):
        assert _response_text(NoTextResponse("STOP")) == ""


class TestGroundingSources:
    """Test suite for _grounding_sources()."""

    def test_collects_web_chunks(self):
        chunks = [
            SimpleNamespace(web=SimpleNamespace(uri="https://a.example", title="A")),
            SimpleNamespace(web=None),
        ]
        response = SimpleNamespace(candidates=[SimpleNamespace(grounding_metadata=SimpleNamespace(grounding_chunks=chunks))])

        sources = _grounding_sources(response)

        assert [(s.uri, s.title) for s in sources] == [("https://a.example", "A"), ("", "")]

    def test_no_candidates(self):
        assert _grounding_sources(SimpleNamespace(candidates=[])) == []


class FakeSearchModels:
    """Captures generate_content requests made through client.aio.models."""

    def __init__(self, response):
        self.response = response
        self.requests = []

    async def generate_content(self, model, contents, config):
        self.requests.append({"model": model, "contents": contents, "config": config})
        return self.response


class TestGroundedGenerate:
    """Test suite for search-grounded generation."""

    @pytest.fixture
    def search_models(self, monkeypatch):
        chunk = SimpleNamespace(web=SimpleNamespace(uri="https://stripe.com", title="Stripe"))
        response = SimpleNamespace(
            text="### Company Culture",
            prompt_feedback=None,
            candidates=[SimpleNamespace(grounding_metadata=SimpleNamespace(grounding_chunks=[chunk]))],
        )
        models = FakeSearchModels(response)
        created = []

        def fake_client(api_key):
            created.append(api_key)
            return SimpleNamespace(aio=SimpleNamespace(models=models))

        monkeypatch.setattr(gemini.genai, "configure", lambda **kwargs: None)
        monkeypatch.setattr(gemini.google_genai, "Client", fake_client)
        models.created = created
        return models

    @pytest.mark.asyncio
    async def test_request_uses_google_search_tool(self, search_models):
        """Gemini 2.x only accepts the google_search tool."""
        client = gemini.GeminiClient(api_key="x", model_name="gemini-2.5-flash")

        await client.grounded_generate("Tell me about Stripe", SamplingConfig(temperature=0.8))

        [request] = search_models.requests
        assert request["model"] == "gemini-2.5-flash"
        assert request["contents"] == "Tell me about Stripe"
        [tool] = request["config"].tools
        assert tool.google_search is not None
        assert tool.google_search_retrieval is None
        assert request["config"].temperature == 0.8

    @pytest.mark.asyncio
    async def test_returns_text_and_sources(self, search_models):
        client = gemini.GeminiClient(api_key="x")

        result = await client.grounded_generate("p", SamplingConfig(temperature=0.8))

        assert result.text == "### Company Culture"
        assert [(s.uri, s.title) for s in result.sources] == [("https://stripe.com", "Stripe")]

    @pytest.mark.asyncio
    async def test_search_client_is_reused(self, search_models):
        client = gemini.GeminiClient(api_key="x")

        await client.grounded_generate("a", SamplingConfig(temperature=0.8))
        await client.grounded_generate("b", SamplingConfig(temperature=0.8))

        assert search_models.created == ["x"]


class TestGeminiChatHandle:
    """Test suite for streaming chat history."""

    @pytest.mark.asyncio
    async def test_history_commits_after_stream(self):
        model = FakeModel([["Hel", "lo"], ["Sure"]])
        handle = GeminiChatHandle(model)

        assert [f async for f in handle.send_streaming("Start")] == ["Hel", "lo"]
        assert [f async for f in handle.send_streaming("Next")] == ["Sure"]

        assert handle.history == [
            {"role": "user", "parts": ["Start"]},
            {"role": "model", "parts": ["Hello"]},
            {"role": "user", "parts": ["Next"]},
            {"role": "model", "parts": ["Sure"]},
        ]
        assert model.requests[1][:2] == handle.history[:2]

    @pytest.mark.asyncio
    async def test_failed_stream_leaves_history_untouched(self):
        model = FakeModel([["Hi"], ["Par", RuntimeError("503")]])
        handle = GeminiChatHandle(model)
        [f async for f in handle.send_streaming("Start")]

        with pytest.raises(RuntimeError):
            [f async for f in handle.send_streaming("Next")]

        assert len(handle.history) == 2


class TestClientFactory:
    """Test suite for lazy client creation."""

    def test_missing_key_raises_on_first_use(self, no_api_key):
        with pytest.raises(MissingAPIKeyError):
            gemini.get_client()

    def test_client_is_shared(self, no_api_key, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        monkeypatch.setattr(gemini.genai, "configure", lambda **kwargs: None)
        gemini.get_settings.cache_clear()

        assert gemini.get_client() is gemini.get_client()

    def test_legacy_key_name_is_accepted(self, no_api_key, monkeypatch):
        monkeypatch.setenv("API_KEY", "legacy-key")
        monkeypatch.setattr(gemini.genai, "configure", lambda **kwargs: None)
        gemini.get_settings.cache_clear()

        assert gemini.get_client().model_name == "gemini-2.5-flash"


# =============================================================================
# Run tests
# =============================================================================

if __name__ == "__main__":
    pytest.main([__file__, "-v"])
