"""
CodePulse - Domain Models.

Defines the core data structures used throughout the application.
Uses dataclasses for clarity and immutability where appropriate.
Structured payloads returned by the AI service live in
``codepulse.core.schemas`` as pydantic models.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, AsyncIterator, Callable

if TYPE_CHECKING:
    from codepulse.core.schemas import (
        CodingChallenge,
        InterviewQuestion,
        MachineCodingProblem,
        SchemaDescriptor,
        SystemDesignQuestion,
    )


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class TaskKind(str, Enum):
    """Kinds of generation calls made against the AI service."""
    GENERAL_QUESTIONS = "general-questions"
    CODING_CHALLENGES = "coding-challenges"
    MACHINE_CODING = "machine-coding"
    SYSTEM_DESIGN = "system-design"
    RESUME_ANALYSIS = "resume-analysis"
    COMPANY_INSIGHTS = "company-insights"
    SOLUTION_GUIDE = "solution-guide"


class RoleCategory(str, Enum):
    """Broad family of a job role; drives prompt and schema variants."""
    TECH = "tech"
    CONTENT = "content"


class DifficultyLevel(str, Enum):
    """Difficulty levels for randomized practice sets."""
    FRESHER = "Fresher"
    JUNIOR = "Junior"
    MID_LEVEL = "Mid-Level"
    SENIOR = "Senior"


class ErrorCategory(str, Enum):
    """User-facing failure categories."""
    INVALID_CREDENTIAL = "invalid-credential"
    QUOTA_EXCEEDED = "quota-exceeded"
    INVALID_REQUEST = "invalid-request"
    SERVICE_UNAVAILABLE = "service-unavailable"
    CONTENT_BLOCKED = "content-blocked"
    UNEXPECTED = "unexpected"
    GENERIC_UNAVAILABLE = "generic-unavailable"


class ChatRole(str, Enum):
    """Author of a chat message."""
    USER = "user"
    MODEL = "model"


class ChatState(str, Enum):
    """States in the chat session state machine."""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    IDLE = "idle"
    STREAMING = "streaming"
    ERROR = "error"


# -----------------------------------------------------------------------------
# Role Classification
# -----------------------------------------------------------------------------

CONTENT_ROLE_KEYWORDS: tuple[str, ...] = (
    "writer",
    "content",
    "editor",
    "copywriter",
    "author",
    "writing",
    "marketing",
    "copywriting",
)


def classify_role(job_role: str) -> RoleCategory:
    """Classify a job role as content or tech by keyword (case-insensitive)."""
    lowered = job_role.lower()
    if any(keyword in lowered for keyword in CONTENT_ROLE_KEYWORDS):
        return RoleCategory.CONTENT
    return RoleCategory.TECH


# -----------------------------------------------------------------------------
# Generation Models
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SamplingConfig:
    """Sampling parameters for one generation attempt."""

    temperature: float
    top_p: float | None = None
    top_k: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"temperature": round(self.temperature, 3)}
        if self.top_p is not None:
            data["top_p"] = round(self.top_p, 3)
        if self.top_k is not None:
            data["top_k"] = self.top_k
        return data


@dataclass(frozen=True)
class GenerationTask:
    """A fully built request for one structured or grounded generation call."""

    task_kind: TaskKind
    prompt: str
    schema: SchemaDescriptor | None = None
    sampling: SamplingConfig | None = None  # Fixed override; None = randomized per attempt
    label: str = ""

    @property
    def name(self) -> str:
        return self.label or self.task_kind.value


# -----------------------------------------------------------------------------
# Aggregate Results
# -----------------------------------------------------------------------------

def _new_generation_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class PrepResult:
    """Full, personalized interview prep kit."""

    role_category: RoleCategory
    general_questions: list[InterviewQuestion]
    technical_questions: list[InterviewQuestion]
    coding_challenges: list[CodingChallenge]
    machine_coding: MachineCodingProblem
    generation_id: str = field(default_factory=_new_generation_id)
    generated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "roleCategory": self.role_category.value,
            "generalQuestions": [q.model_dump(by_alias=True) for q in self.general_questions],
            "technicalQuestions": [q.model_dump(by_alias=True) for q in self.technical_questions],
            "codingChallenges": [c.model_dump(by_alias=True) for c in self.coding_challenges],
            "machineCoding": self.machine_coding.model_dump(by_alias=True),
            "generationId": self.generation_id,
        }


@dataclass
class RandomizedPrepResult:
    """Randomized practice set for a role at a given difficulty."""

    role_category: RoleCategory
    difficulty: DifficultyLevel
    general_questions: list[InterviewQuestion]
    technical_questions: list[InterviewQuestion]
    system_design_questions: list[SystemDesignQuestion]
    coding_challenges: list[CodingChallenge]
    machine_coding: MachineCodingProblem
    generation_id: str = field(default_factory=_new_generation_id)
    generated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "roleCategory": self.role_category.value,
            "difficulty": self.difficulty.value,
            "generalQuestions": [q.model_dump(by_alias=True) for q in self.general_questions],
            "technicalQuestions": [q.model_dump(by_alias=True) for q in self.technical_questions],
            "systemDesignQuestions": [q.model_dump(by_alias=True) for q in self.system_design_questions],
            "codingChallenges": [c.model_dump(by_alias=True) for c in self.coding_challenges],
            "machineCoding": self.machine_coding.model_dump(by_alias=True),
            "generationId": self.generation_id,
        }


# -----------------------------------------------------------------------------
# Company Research Models
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class GroundingSource:
    """A web source cited by a grounded response."""

    uri: str
    title: str


@dataclass
class CompanyInsights:
    """Search-grounded company research briefing."""

    company_name: str
    content: str
    sources: list[GroundingSource] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "companyName": self.company_name,
            "content": self.content,
            "sources": [{"uri": s.uri, "title": s.title} for s in self.sources],
        }


# -----------------------------------------------------------------------------
# Chat Models
# -----------------------------------------------------------------------------

@dataclass
class ChatMessage:
    """
    Single message in a chat transcript.

    A model message grows while its response streams in and is
    sealed once the stream ends.
    """

    role: ChatRole
    text: str = ""
    is_error: bool = False
    on_retry: Callable[[], AsyncIterator[str]] | None = None
    sealed: bool = False
    timestamp: datetime = field(default_factory=datetime.now)

    def append(self, fragment: str) -> None:
        """Append a streamed fragment to an open message."""
        if self.sealed:
            raise ValueError("Cannot append to a sealed message")
        self.text += fragment

    def seal(self) -> None:
        self.sealed = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role.value,
            "text": self.text,
            "is_error": self.is_error,
            "can_retry": self.on_retry is not None,
        }
