"""
Pytest configuration and fixtures for CodePulse tests.

Provides a scripted stand-in for the Gemini client, a scripted chat
handle, a sleep that records delays instead of waiting, and sample
service payloads.
"""

import json
import sys
from pathlib import Path

import pytest


# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from codepulse.core.config import Settings, get_settings
from codepulse.infra.llm.gemini import GroundedResponse, reset_client


# =============================================================================
# Fakes
# =============================================================================

class RecordingSleep:
    """Awaitable sleep that records requested delays and returns at once."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeChatHandle:
    """
    Scripted conversation.

    Each script entry answers one send: a list of fragments, where an
    exception instance in the list is raised at that point of the stream.
    Like the real handle, an exchange is committed only once its stream
    completes.
    """

    def __init__(self, scripts=None):
        self.scripts = list(scripts or [])
        self.sent: list[str] = []
        self.history: list[tuple[str, str]] = []

    async def send_streaming(self, message):
        self.sent.append(message)
        script = self.scripts.pop(0) if self.scripts else ["OK"]

        fragments = []
        for item in script:
            if isinstance(item, BaseException):
                raise item
            fragments.append(item)
            yield item

        self.history.append((message, "".join(fragments)))


class FakeClient:
    """
    Scripted stand-in for GeminiClient.

    ``responses`` answer structured calls and ``grounded`` answer grounded
    calls, in order. An exception instance in either list is raised.
    """

    def __init__(self, responses=None, grounded=None, chat_handle=None):
        self.responses = list(responses or [])
        self.grounded = list(grounded or [])
        self.chat_handle = chat_handle
        self.calls: list[dict] = []
        self.chat_instructions: list[str] = []

    @property
    def model_name(self):
        return "fake-model"

    async def structured_generate(self, prompt, response_schema, sampling):
        self.calls.append({"prompt": prompt, "schema": response_schema, "sampling": sampling})
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def grounded_generate(self, prompt, sampling):
        self.calls.append({"prompt": prompt, "schema": None, "sampling": sampling})
        item = self.grounded.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def open_chat_session(self, system_instruction, model_name=None):
        self.chat_instructions.append(system_instruction)
        if self.chat_handle is None:
            self.chat_handle = FakeChatHandle()
        return self.chat_handle


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def project_root_path():
    """Return the project root directory."""
    return project_root


@pytest.fixture
def settings():
    """Deterministic settings, independent of any local .env file."""
    return Settings(
        _env_file=None,
        GEMINI_API_KEY="test-key",
        RANDOM_SEED=1234,
        REQUEST_TIMEOUT_SECONDS=5.0,
    )


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def no_api_key(monkeypatch):
    """Environment with no Gemini credential configured."""
    monkeypatch.setenv("GEMINI_API_KEY", "")
    monkeypatch.setenv("API_KEY", "")
    monkeypatch.chdir(project_root / "tests")
    get_settings.cache_clear()
    reset_client()
    yield
    get_settings.cache_clear()
    reset_client()


# =============================================================================
# Sample Payloads
# =============================================================================

def _qa(prefix, count):
    return [{"question": f"{prefix} question {i}?", "answer": f"**{prefix}** answer {i}."} for i in range(1, count + 1)]


@pytest.fixture
def questions_json():
    return json.dumps({
        "generalQuestions": _qa("General", 5),
        "technicalQuestions": _qa("Technical", 5),
    })


@pytest.fixture
def challenges_json():
    solutions = {
        "javascript": "function twoSum() {}",
        "python": "def two_sum(): pass",
        "java": "class Solution {}",
        "cpp": "int main() {}",
    }
    return json.dumps([
        {"title": "Two Sum", "problem": "Find two numbers.", "examples": "[2,7] -> 9", "solutions": solutions},
        {"title": "LRU Cache", "problem": "Design a cache.", "examples": "get/put", "solutions": solutions},
    ])


@pytest.fixture
def writing_challenges_json():
    return json.dumps([
        {
            "title": "Launch Blog Post",
            "problem": "Write a 300-word launch post.",
            "examples": "Tone: friendly",
            "solutions": {"javascript": "Introducing our new app...", "python": "N/A", "java": "N/A", "cpp": "N/A"},
        },
        {
            "title": "API Docs Rewrite",
            "problem": "Rewrite this endpoint description.",
            "examples": "Before/after",
            "solutions": {"javascript": "GET /users returns..."},
        },
    ])


@pytest.fixture
def machine_coding_json():
    return json.dumps({"title": "Parking Lot Service", "problem": "## Requirements\n- Allocate spots"})


@pytest.fixture
def system_design_json():
    return json.dumps(_qa("Design", 3))


@pytest.fixture
def solution_guide_json():
    return json.dumps({"solutionGuide": "### Step 1\nModel the entities."})


@pytest.fixture
def resume_analysis_json():
    return json.dumps({
        "matchScore": 72,
        "atsFriendliness": "- Uses standard headings",
        "resumeSummary": "Backend engineer with Flask experience.",
        "overallFeedback": "Good alignment.",
        "strengths": "- **Python**: strong",
        "improvementSuggestions": "- **Metrics**: add numbers",
        "jdKeywords": ["Python", "SQL", "REST"],
        "missingKeywords": ["Kubernetes"],
    })


@pytest.fixture
def grounded_response():
    from codepulse.core.domain.models import GroundingSource

    return GroundedResponse(
        text="### Company Culture & Values\nCustomer obsession.",
        sources=[
            GroundingSource(uri="https://example.com/about", title="About"),
            GroundingSource(uri="", title="No link"),
            GroundingSource(uri="https://example.com/news", title=""),
        ],
    )


@pytest.fixture
def sample_resume_text():
    """Sample resume text for testing."""
    return """
John Doe
Software Engineer
john.doe@email.com | github.com/johndoe

EXPERIENCE

Software Engineer Intern - Tech Company (2024)
- Built REST APIs with Flask
- Implemented PostgreSQL database layer
- Wrote comprehensive unit tests

SKILLS

Python, Flask, PostgreSQL, Docker, Git
    """.strip()


@pytest.fixture
def sample_job_description():
    """Sample job description for testing."""
    return """
Backend Developer

Requirements:
- 2+ years Python experience
- SQL database knowledge
- REST API design experience

Responsibilities:
- Design and implement scalable APIs
- Participate in code reviews
    """.strip()
