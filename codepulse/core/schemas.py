"""
CodePulse - Response Schemas.

Pydantic models describing every structured payload requested from the
AI service. Each model is the single source of truth for both the
response schema sent with the request and the validation applied to
the reply. Field aliases match the camelCase keys on the wire.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from codepulse.core.domain.models import RoleCategory, TaskKind
from codepulse.core.exceptions import SchemaViolationError


NOT_APPLICABLE = "N/A"


class _Payload(BaseModel):
    """Base for service payloads: strict types, camelCase aliases."""

    model_config = ConfigDict(strict=True, populate_by_name=True, extra="ignore")


# =============================================================================
# Question Payloads
# =============================================================================

class InterviewQuestion(_Payload):
    question: str
    answer: str = Field(
        ...,
        description="A well-structured, professional answer using markdown formatting.",
    )


class InterviewQuestions(_Payload):
    general_questions: list[InterviewQuestion] = Field(
        ...,
        alias="generalQuestions",
        description="General/HR questions with professional answers.",
    )
    technical_questions: list[InterviewQuestion] = Field(
        ...,
        alias="technicalQuestions",
        description="Technical or role-specific questions with detailed answers.",
    )


class SystemDesignQuestion(_Payload):
    question: str
    answer: str = Field(
        ...,
        description="A detailed answer using markdown formatting with headers and bullet points.",
    )


# =============================================================================
# Challenge Payloads
# =============================================================================

class CodeSolution(_Payload):
    javascript: str
    python: str
    java: str
    cpp: str


class WritingSolution(CodeSolution):
    """Writing challenges carry one sample; the other slots are not applicable."""

    javascript: str = Field(..., description="The complete writing sample.")
    python: str = Field(NOT_APPLICABLE, description="Always 'N/A'.")
    java: str = Field(NOT_APPLICABLE, description="Always 'N/A'.")
    cpp: str = Field(NOT_APPLICABLE, description="Always 'N/A'.")


class CodingChallenge(_Payload):
    title: str
    problem: str = Field(..., description="Detailed problem description with markdown formatting.")
    examples: str = Field(..., description="Clear examples with proper formatting.")
    solutions: CodeSolution


class WritingChallenge(CodingChallenge):
    solutions: WritingSolution


class MachineCodingProblem(_Payload):
    title: str
    problem: str = Field(
        ...,
        description="Detailed project description with requirements in markdown format.",
    )


class MachineCodingSolution(_Payload):
    solution_guide: str = Field(
        ...,
        alias="solutionGuide",
        description="Step-by-step solution guide with markdown formatting.",
    )


# =============================================================================
# Resume Analysis Payload
# =============================================================================

class ResumeAnalysis(_Payload):
    match_score: float = Field(..., alias="matchScore", ge=0, le=100, description="Match score from 0-100.")
    ats_friendliness: str = Field(
        ..., alias="atsFriendliness", description="ATS compatibility assessment with bullet points."
    )
    resume_summary: str = Field(
        ...,
        alias="resumeSummary",
        description="Professional summary tailored to the job (no quotation marks).",
    )
    overall_feedback: str = Field(..., alias="overallFeedback", description="Concise alignment summary.")
    strengths: str = Field(..., description="Bulleted list of strengths with bold titles.")
    improvement_suggestions: str = Field(
        ..., alias="improvementSuggestions", description="Bulleted list of improvements with bold titles."
    )
    jd_keywords: list[str] = Field(..., alias="jdKeywords")
    missing_keywords: list[str] = Field(..., alias="missingKeywords")


# =============================================================================
# Service Schema Builder
# =============================================================================

_SCALAR_TYPES: dict[type, str] = {
    str: "STRING",
    float: "NUMBER",
    int: "INTEGER",
    bool: "BOOLEAN",
}


def build_response_schema(annotation: Any, description: str | None = None) -> dict[str, Any]:
    """
    Translate a payload annotation into the service's response schema format.

    Supports pydantic models, ``list[...]`` and scalar types, which
    covers every payload above.
    """
    if get_origin(annotation) is list:
        (item_type,) = get_args(annotation)
        schema: dict[str, Any] = {"type": "ARRAY", "items": build_response_schema(item_type)}
    elif isinstance(annotation, type) and issubclass(annotation, BaseModel):
        properties: dict[str, Any] = {}
        required: list[str] = []
        for name, info in annotation.model_fields.items():
            key = info.alias or name
            properties[key] = build_response_schema(info.annotation, info.description)
            if info.is_required():
                required.append(key)
        schema = {"type": "OBJECT", "properties": properties}
        if required:
            schema["required"] = required
    elif annotation in _SCALAR_TYPES:
        schema = {"type": _SCALAR_TYPES[annotation]}
    else:
        raise TypeError(f"Unsupported schema annotation: {annotation!r}")

    if description:
        schema["description"] = description
    return schema


def _format_location(loc: tuple[Any, ...]) -> str:
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path or "<root>"


# =============================================================================
# Schema Registry
# =============================================================================

@dataclass(frozen=True)
class SchemaDescriptor:
    """Expected output shape for one generation task."""

    name: str
    annotation: Any
    description: str | None = None
    response_schema: dict[str, Any] = field(init=False, repr=False, compare=False)
    _adapter: TypeAdapter = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "response_schema", build_response_schema(self.annotation, self.description))
        object.__setattr__(self, "_adapter", TypeAdapter(self.annotation))

    def validate(self, data: Any) -> None:
        """Check ``data`` recursively; raise SchemaViolationError on the first bad field."""
        try:
            self._adapter.validate_python(data)
        except ValidationError as e:
            first = e.errors()[0]
            raise SchemaViolationError(
                schema_name=self.name,
                field_path=_format_location(tuple(first["loc"])),
                reason=first["msg"],
            ) from e

    def load(self, data: Any) -> Any:
        """Convert validated JSON into typed payload objects."""
        return self._adapter.validate_python(data)


QUESTIONS_SCHEMA = SchemaDescriptor("questions", InterviewQuestions)

CODING_CHALLENGES_SCHEMA = SchemaDescriptor(
    "coding-challenges",
    list[CodingChallenge],
    "2-3 practical coding challenges with solutions.",
)

WRITING_CHALLENGES_SCHEMA = SchemaDescriptor(
    "writing-challenges",
    list[WritingChallenge],
    "2-3 practical writing challenges; the writing sample goes in 'javascript', other solution fields are 'N/A'.",
)

MACHINE_CODING_SCHEMA = SchemaDescriptor("machine-coding", MachineCodingProblem)

SYSTEM_DESIGN_SCHEMA = SchemaDescriptor(
    "system-design",
    list[SystemDesignQuestion],
    "2-3 system design or strategic questions with detailed answers.",
)

SOLUTION_GUIDE_SCHEMA = SchemaDescriptor("solution-guide", MachineCodingSolution)

RESUME_ANALYSIS_SCHEMA = SchemaDescriptor("resume-analysis", ResumeAnalysis)


_REGISTRY: dict[TaskKind, SchemaDescriptor] = {
    TaskKind.GENERAL_QUESTIONS: QUESTIONS_SCHEMA,
    TaskKind.CODING_CHALLENGES: CODING_CHALLENGES_SCHEMA,
    TaskKind.MACHINE_CODING: MACHINE_CODING_SCHEMA,
    TaskKind.SYSTEM_DESIGN: SYSTEM_DESIGN_SCHEMA,
    TaskKind.SOLUTION_GUIDE: SOLUTION_GUIDE_SCHEMA,
    TaskKind.RESUME_ANALYSIS: RESUME_ANALYSIS_SCHEMA,
}


def get_schema(task_kind: TaskKind, role_category: RoleCategory = RoleCategory.TECH) -> SchemaDescriptor:
    """Look up the schema for a task, picking the content variant where one exists."""
    if task_kind is TaskKind.CODING_CHALLENGES and role_category is RoleCategory.CONTENT:
        return WRITING_CHALLENGES_SCHEMA
    try:
        return _REGISTRY[task_kind]
    except KeyError:
        raise KeyError(f"No structured schema for task kind: {task_kind.value}") from None
