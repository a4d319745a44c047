"""
CodePulse - Prep Orchestrator.

Coordinates the multi-call generation operations behind every feature:
- Prompt Composer builds one GenerationTask per sub-call
- Retry Controller runs each call with backoff and fresh sampling
- Response Parser validates every reply against its schema
- Error Classifier turns failures into user-facing messages

Sub-calls run strictly one after another with a short pause between
them. If any sub-call fails the whole operation fails; no partial
result is ever returned.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable

from codepulse.app import chat
from codepulse.app.chat import ChatSession
from codepulse.app.prompt_composer import PromptComposer
from codepulse.core import prompts
from codepulse.core.config import Settings, get_settings
from codepulse.core.domain.models import (
    CompanyInsights,
    DifficultyLevel,
    GenerationTask,
    PrepResult,
    RandomizedPrepResult,
    SamplingConfig,
    classify_role,
)
from codepulse.core.exceptions import EmptyResponseError, MissingInputError
from codepulse.core.schemas import MachineCodingSolution, ResumeAnalysis
from codepulse.infra.llm.errors import classify
from codepulse.infra.llm.gemini import GeminiClient, GroundedResponse, get_client
from codepulse.infra.llm.parser import parse_and_validate
from codepulse.infra.llm.retry import RetryController


logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


def _require(**fields: str | None) -> None:
    """Raise MissingInputError naming every blank field."""
    missing = [name.replace("_", " ") for name, value in fields.items() if value is None or not value.strip()]
    if missing:
        raise MissingInputError(*missing)


class PrepOrchestrator:
    """
    Entry point for every generation feature.

    Usage:
        orchestrator = PrepOrchestrator()

        kit = await orchestrator.generate_full_prep_kit("Backend Engineer")
        practice = await orchestrator.generate_randomized_prep_set(
            "Content Writer", DifficultyLevel.SENIOR
        )
        briefing = await orchestrator.generate_company_insights("Stripe")
    """

    def __init__(
        self,
        client: GeminiClient | None = None,
        composer: PromptComposer | None = None,
        retry: RetryController | None = None,
        sleep: SleepFn = asyncio.sleep,
        settings: Settings | None = None,
    ):
        """
        Args:
            client: AI service handle (resolved lazily if not provided)
            composer: Prompt builder
            retry: Retry controller for every service call
            sleep: Awaitable sleep used for pauses between sub-calls
            settings: Application settings
        """
        self._settings = settings or get_settings()
        self._client = client
        self._sleep = sleep

        rng = random.Random(self._settings.RANDOM_SEED)
        self._composer = composer or PromptComposer(rng)
        self._retry = retry or RetryController(self._settings, rng=rng, sleep=sleep)

    # -------------------------------------------------------------------------
    # Service Plumbing
    # -------------------------------------------------------------------------

    def _get_client(self) -> GeminiClient:
        """Resolve the service handle; a missing API key is classified here, before any attempt."""
        if self._client is None:
            try:
                self._client = get_client()
            except Exception as e:
                raise classify(e, "client setup") from e
        return self._client

    async def _run_structured(self, client: GeminiClient, task: GenerationTask) -> Any:
        """Run one structured task through the retry controller and return typed payloads."""
        schema = task.schema
        if schema is None:
            raise ValueError(f"Task {task.name} has no response schema")

        async def attempt(sampling: SamplingConfig) -> Any:
            raw = await client.structured_generate(
                task.prompt,
                schema.response_schema,
                task.sampling or sampling,
            )
            return parse_and_validate(raw, schema)

        data = await self._retry.execute(attempt, context=task.name)
        return schema.load(data)

    async def _run_sequence(
        self,
        client: GeminiClient,
        tasks: list[GenerationTask],
        pause_seconds: float,
    ) -> list[Any]:
        """Run tasks in order, pausing after each success except the last."""
        results = []
        for index, task in enumerate(tasks):
            results.append(await self._run_structured(client, task))
            logger.info(f"✅ {task.name} ({index + 1}/{len(tasks)})")
            if index < len(tasks) - 1:
                await self._sleep(pause_seconds)
        return results

    # -------------------------------------------------------------------------
    # Prep Kits
    # -------------------------------------------------------------------------

    async def generate_full_prep_kit(
        self,
        job_role: str,
        job_description: str | None = None,
        resume: str | None = None,
    ) -> PrepResult:
        """
        Generate questions, challenges and a machine-coding problem for a role.

        Raises:
            MissingInputError: If the job role is blank
            ClassifiedError: If any of the three calls fails
        """
        _require(job_role=job_role)
        client = self._get_client()

        category = classify_role(job_role)
        request = self._composer.begin(job_role, category, job_description, resume)
        logger.info(f"🎯 Full prep kit: role={job_role!r} category={category.value} session={request.session_marker}")

        questions, challenges, machine_coding = await self._run_sequence(
            client,
            self._composer.full_kit_tasks(request),
            self._settings.FULL_KIT_PAUSE_SECONDS,
        )

        return PrepResult(
            role_category=category,
            general_questions=questions.general_questions,
            technical_questions=questions.technical_questions,
            coding_challenges=challenges,
            machine_coding=machine_coding,
        )

    async def generate_randomized_prep_set(
        self,
        job_role: str,
        difficulty: DifficultyLevel | str,
        job_description: str | None = None,
        resume: str | None = None,
    ) -> RandomizedPrepResult:
        """
        Generate a practice set at ``difficulty``: questions, system design
        (or content strategy), challenges and a machine-coding problem.

        Raises:
            MissingInputError: If the job role is blank
            ClassifiedError: If any of the four calls fails
        """
        _require(job_role=job_role)
        difficulty = DifficultyLevel(difficulty)
        client = self._get_client()

        category = classify_role(job_role)
        request = self._composer.begin(job_role, category, job_description, resume, difficulty)
        logger.info(
            f"🎲 Randomized set: role={job_role!r} difficulty={difficulty.value} "
            f"category={category.value} session={request.session_marker}"
        )

        questions, design, challenges, machine_coding = await self._run_sequence(
            client,
            self._composer.randomized_tasks(request),
            self._settings.RANDOMIZED_PAUSE_SECONDS,
        )

        return RandomizedPrepResult(
            role_category=category,
            difficulty=difficulty,
            general_questions=questions.general_questions,
            technical_questions=questions.technical_questions,
            system_design_questions=design,
            coding_challenges=challenges,
            machine_coding=machine_coding,
        )

    # -------------------------------------------------------------------------
    # Single-Call Features
    # -------------------------------------------------------------------------

    async def generate_machine_coding_solution(self, title: str, problem_text: str) -> MachineCodingSolution:
        """Step-by-step markdown guide for a machine-coding problem."""
        _require(title=title, problem=problem_text)
        client = self._get_client()

        task = self._composer.solution_guide_task(title, problem_text)
        return await self._run_structured(client, task)

    async def analyze_resume(self, resume_text: str, job_description: str) -> ResumeAnalysis:
        """Score a resume against a job description."""
        _require(resume=resume_text, job_description=job_description)
        client = self._get_client()

        task = self._composer.resume_analysis_task(resume_text, job_description)
        analysis = await self._run_structured(client, task)
        logger.info(f"✅ Resume analysis: match score {analysis.match_score:g}")
        return analysis

    async def generate_company_insights(self, company_name: str) -> CompanyInsights:
        """
        Search-grounded research briefing on a company.

        Sources missing a URI or a title are dropped.
        """
        _require(company_name=company_name)
        client = self._get_client()

        task = self._composer.company_insights_task(company_name, self._settings.GROUNDED_TEMPERATURE)

        async def attempt(sampling: SamplingConfig) -> GroundedResponse:
            response = await client.grounded_generate(task.prompt, task.sampling or sampling)
            if not response.text or not response.text.strip():
                raise EmptyResponseError()
            return response

        response = await self._retry.execute(attempt, context=task.name)

        sources = [source for source in response.sources if source.uri and source.title]
        logger.info(f"✅ Company insights for {company_name!r}: {len(sources)} sources")
        return CompanyInsights(company_name=company_name, content=response.text, sources=sources)

    # -------------------------------------------------------------------------
    # Chat Sessions
    # -------------------------------------------------------------------------

    def create_chat_session(
        self,
        system_instruction: str,
        kickoff_message: str,
        model: str | None = None,
        retry_hint: str = prompts.DOUBT_BUSTER_RETRY_HINT,
    ) -> ChatSession:
        """Open a streaming chat bound to ``system_instruction``."""
        return chat.create_chat_session(
            system_instruction,
            kickoff_message,
            retry_hint,
            model=model,
            client=self._get_client(),
        )

    def start_mock_interview(
        self,
        job_role: str,
        job_description: str | None = None,
        resume: str | None = None,
    ) -> ChatSession:
        _require(job_role=job_role)
        return chat.create_mock_interview_session(job_role, job_description, resume, client=self._get_client())

    def start_doubt_buster(self) -> ChatSession:
        return chat.create_doubt_buster_session(client=self._get_client())


# -----------------------------------------------------------------------------
# Factory Function
# -----------------------------------------------------------------------------

def create_orchestrator() -> PrepOrchestrator:
    """Create an orchestrator wired to the shared client and settings."""
    return PrepOrchestrator()


_default_orchestrator: PrepOrchestrator | None = None


def get_orchestrator() -> PrepOrchestrator:
    global _default_orchestrator
    if _default_orchestrator is None:
        _default_orchestrator = create_orchestrator()
    return _default_orchestrator


# -----------------------------------------------------------------------------
# Convenience Functions
# -----------------------------------------------------------------------------

async def generate_full_prep_kit(
    job_role: str,
    job_description: str | None = None,
    resume: str | None = None,
) -> PrepResult:
    return await get_orchestrator().generate_full_prep_kit(job_role, job_description, resume)


async def generate_randomized_prep_set(
    job_role: str,
    difficulty: DifficultyLevel | str,
    job_description: str | None = None,
    resume: str | None = None,
) -> RandomizedPrepResult:
    return await get_orchestrator().generate_randomized_prep_set(job_role, difficulty, job_description, resume)


async def generate_machine_coding_solution(title: str, problem_text: str) -> MachineCodingSolution:
    return await get_orchestrator().generate_machine_coding_solution(title, problem_text)


async def generate_company_insights(company_name: str) -> CompanyInsights:
    return await get_orchestrator().generate_company_insights(company_name)


async def analyze_resume(resume_text: str, job_description: str) -> ResumeAnalysis:
    return await get_orchestrator().analyze_resume(resume_text, job_description)


def create_chat_session(
    system_instruction: str,
    kickoff_message: str,
    model: str | None = None,
) -> ChatSession:
    return get_orchestrator().create_chat_session(system_instruction, kickoff_message, model)
