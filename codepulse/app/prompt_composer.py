"""
CodePulse - Prompt Composer.

Builds the GenerationTask for every generation call from the user's
inputs, the role category, and per-call randomization (persona preamble,
context framing, diversity seed) that keeps repeated requests for the
same inputs from producing the same content.
"""

from __future__ import annotations

import logging
import random
import string
import time
from dataclasses import dataclass
from typing import Callable

from codepulse.core import prompts
from codepulse.core.domain.models import (
    DifficultyLevel,
    GenerationTask,
    RoleCategory,
    SamplingConfig,
    TaskKind,
)
from codepulse.core.schemas import get_schema


logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


@dataclass(frozen=True)
class PrepRequest:
    """Inputs shared by every sub-call of one orchestrated operation."""

    job_role: str
    role_category: RoleCategory
    session_marker: str
    diversity_seeds: tuple[str, ...]
    job_description: str | None = None
    resume: str | None = None
    difficulty: DifficultyLevel | None = None


class PromptComposer:
    """
    Produces prompts for each generation task.

    Pass a seeded ``random.Random`` (and a fixed ``clock``) for
    reproducible output.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._rng = rng or random.Random()
        self._clock = clock

    # -------------------------------------------------------------------------
    # Randomization
    # -------------------------------------------------------------------------

    def new_markers(self) -> tuple[str, tuple[str, ...]]:
        """Return a session marker and five diversity seeds."""
        timestamp = int(self._clock() * 1000)
        random_id = _to_base36(self._rng.getrandbits(64))[:13]
        session_marker = f"{timestamp}-{random_id}"

        seeds = (
            f"Alpha-{random_id}",
            f"Beta-{timestamp}",
            f"Gamma-{self._rng.randrange(10000)}",
            f"Delta-{timestamp % 10000}",
            f"Epsilon-{random_id[:5]}",
        )
        return session_marker, seeds

    def persona(self) -> str:
        return self._rng.choice(prompts.PERSONA_PREAMBLES)

    def frame(self, context: str) -> str:
        return self._rng.choice(prompts.CONTEXT_FRAMINGS).format(context=context)

    # -------------------------------------------------------------------------
    # Context
    # -------------------------------------------------------------------------

    def begin(
        self,
        job_role: str,
        role_category: RoleCategory,
        job_description: str | None = None,
        resume: str | None = None,
        difficulty: DifficultyLevel | None = None,
    ) -> PrepRequest:
        """Fix the shared inputs and markers for one orchestrated operation."""
        session_marker, seeds = self.new_markers()
        return PrepRequest(
            job_role=job_role,
            role_category=role_category,
            session_marker=session_marker,
            diversity_seeds=seeds,
            job_description=job_description,
            resume=resume,
            difficulty=difficulty,
        )

    @staticmethod
    def build_context(request: PrepRequest) -> str:
        """Join the non-blank context fields; blank optional fields are left out."""
        parts = [f"Job Role: {request.job_role}"]
        if request.difficulty is not None:
            parts.append(f"Difficulty: {request.difficulty.value}")
        parts.append(f"Role Category: {request.role_category.value}")
        parts.append(f"Session: {request.session_marker}")
        if not _is_blank(request.job_description):
            parts.append(f"Job Description: {request.job_description}")
        if not _is_blank(request.resume):
            parts.append(f"Resume Context: {request.resume}")
        return "\n\n".join(parts)

    def _render(self, template: str, request: PrepRequest, seed_index: int, **extra: str) -> str:
        wording = prompts.ROLE_WORDING[request.role_category]
        difficulty = request.difficulty.value if request.difficulty else ""
        return template.format(
            persona=self.persona(),
            seed=request.diversity_seeds[seed_index],
            context=self.frame(self.build_context(request)),
            difficulty=difficulty,
            difficulty_upper=difficulty.upper(),
            **wording,
            **extra,
        )

    # -------------------------------------------------------------------------
    # Full Prep Kit
    # -------------------------------------------------------------------------

    def full_kit_tasks(self, request: PrepRequest) -> list[GenerationTask]:
        """Questions, challenges, machine-coding problem (in call order)."""
        category = request.role_category
        return [
            GenerationTask(
                task_kind=TaskKind.GENERAL_QUESTIONS,
                prompt=self._render(prompts.FULL_QUESTIONS_TEMPLATE, request, 0),
                schema=get_schema(TaskKind.GENERAL_QUESTIONS, category),
                label="questions",
            ),
            GenerationTask(
                task_kind=TaskKind.CODING_CHALLENGES,
                prompt=self._render(prompts.FULL_CHALLENGES_TEMPLATE, request, 1),
                schema=get_schema(TaskKind.CODING_CHALLENGES, category),
                label="challenges",
            ),
            GenerationTask(
                task_kind=TaskKind.MACHINE_CODING,
                prompt=self._render(prompts.FULL_MACHINE_CODING_TEMPLATE, request, 2),
                schema=get_schema(TaskKind.MACHINE_CODING, category),
                label="machine-coding",
            ),
        ]

    # -------------------------------------------------------------------------
    # Randomized Practice Set
    # -------------------------------------------------------------------------

    def randomized_tasks(self, request: PrepRequest) -> list[GenerationTask]:
        """Questions, system design/strategy, challenges, machine-coding problem."""
        if request.difficulty is None:
            raise ValueError("A randomized practice set needs a difficulty level")

        category = request.role_category
        return [
            GenerationTask(
                task_kind=TaskKind.GENERAL_QUESTIONS,
                prompt=self._render(prompts.RANDOM_QUESTIONS_TEMPLATE, request, 0),
                schema=get_schema(TaskKind.GENERAL_QUESTIONS, category),
                label="random-questions",
            ),
            GenerationTask(
                task_kind=TaskKind.SYSTEM_DESIGN,
                prompt=self._render(prompts.RANDOM_DESIGN_TEMPLATE, request, 1),
                schema=get_schema(TaskKind.SYSTEM_DESIGN, category),
                label="system-design",
            ),
            GenerationTask(
                task_kind=TaskKind.CODING_CHALLENGES,
                prompt=self._render(prompts.RANDOM_CHALLENGES_TEMPLATE, request, 2),
                schema=get_schema(TaskKind.CODING_CHALLENGES, category),
                label="random-challenges",
            ),
            GenerationTask(
                task_kind=TaskKind.MACHINE_CODING,
                prompt=self._render(prompts.RANDOM_MACHINE_CODING_TEMPLATE, request, 3),
                schema=get_schema(TaskKind.MACHINE_CODING, category),
                label="random-machine-coding",
            ),
        ]

    # -------------------------------------------------------------------------
    # Single-Call Tasks
    # -------------------------------------------------------------------------

    def solution_guide_task(self, title: str, problem: str) -> GenerationTask:
        session_marker, _ = self.new_markers()
        prompt = prompts.SOLUTION_GUIDE_TEMPLATE.format(
            persona=self.persona(),
            session_marker=session_marker,
            title=title,
            problem=problem,
        )
        return GenerationTask(
            task_kind=TaskKind.SOLUTION_GUIDE,
            prompt=prompt,
            schema=get_schema(TaskKind.SOLUTION_GUIDE),
            label="solution-guide",
        )

    def company_insights_task(self, company_name: str, temperature: float) -> GenerationTask:
        session_marker, _ = self.new_markers()
        prompt = prompts.COMPANY_INSIGHTS_TEMPLATE.format(
            persona=self.persona(),
            session_marker=session_marker,
            company_name=company_name,
        )
        return GenerationTask(
            task_kind=TaskKind.COMPANY_INSIGHTS,
            prompt=prompt,
            sampling=SamplingConfig(temperature=temperature),
            label=f'company-insights "{company_name}"',
        )

    def resume_analysis_task(self, resume: str, job_description: str) -> GenerationTask:
        session_marker, _ = self.new_markers()
        prompt = prompts.RESUME_ANALYSIS_TEMPLATE.format(
            persona=self.persona(),
            session_marker=session_marker,
            job_description=job_description,
            resume=resume,
        )
        return GenerationTask(
            task_kind=TaskKind.RESUME_ANALYSIS,
            prompt=prompt,
            schema=get_schema(TaskKind.RESUME_ANALYSIS),
            label="resume-analysis",
        )


# -----------------------------------------------------------------------------
# Chat Instructions
# -----------------------------------------------------------------------------

def mock_interview_instruction(
    job_role: str,
    job_description: str | None = None,
    resume: str | None = None,
) -> str:
    """System instruction for a mock interview on ``job_role``."""
    jd_context = (
        f'The job description is: "{job_description}"'
        if not _is_blank(job_description)
        else "No job description was provided."
    )
    resume_context = (
        f'The candidate\'s resume is: "{resume}"'
        if not _is_blank(resume)
        else "No resume was provided."
    )
    return prompts.MOCK_INTERVIEW_INSTRUCTION.format(
        job_role=job_role,
        jd_context=jd_context,
        resume_context=resume_context,
    )


def explain_prompt(text: str) -> str:
    """Request used by the 'explain this' shortcut into Doubt Buster."""
    return prompts.EXPLAIN_TEMPLATE.format(text=text)
