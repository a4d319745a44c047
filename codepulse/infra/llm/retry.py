"""
CodePulse - Retry/Backoff Controller.

Wraps one generation attempt with bounded retries, linearly growing
delays with uniform jitter, and freshly randomized sampling parameters
per attempt so a retry does not reproduce the output that just failed.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    before_sleep_log,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_incrementing,
)
from tenacity.wait import wait_base

from codepulse.core.config import Settings, get_settings
from codepulse.core.domain.models import SamplingConfig
from codepulse.core.exceptions import ConfigurationError, LLMTimeoutError
from codepulse.infra.llm.errors import classify


logger = logging.getLogger(__name__)

T = TypeVar("T")

AttemptFn = Callable[[SamplingConfig], Awaitable[T]]
SleepFn = Callable[[float], Awaitable[None]]


class SamplingPolicy:
    """
    Draws sampling parameters within fixed ranges.

    temperature: 0.9 - 1.2
    top_p:       0.85 - 0.95
    top_k:       30 - 49
    """

    TEMPERATURE_RANGE = (0.9, 1.2)
    TOP_P_RANGE = (0.85, 0.95)
    TOP_K_RANGE = (30, 50)  # half-open

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()

    def next(self) -> SamplingConfig:
        t_lo, t_hi = self.TEMPERATURE_RANGE
        p_lo, p_hi = self.TOP_P_RANGE
        return SamplingConfig(
            temperature=self._rng.uniform(t_lo, t_hi),
            top_p=self._rng.uniform(p_lo, p_hi),
            top_k=self._rng.randrange(*self.TOP_K_RANGE),
        )


class wait_seeded_jitter(wait_base):
    """Uniform random wait drawn from a caller-owned RNG."""

    def __init__(self, rng: random.Random, maximum: float):
        self.rng = rng
        self.maximum = maximum

    def __call__(self, retry_state: RetryCallState) -> float:
        return self.rng.uniform(0, self.maximum)


class RetryController:
    """
    Runs an attempt function up to ``max_attempts`` times.

    The delay after failed attempt k is ``base * k + uniform(0, jitter)``
    seconds. When every attempt fails, the last failure is classified and
    raised as a ClassifiedError.

    Usage:
        controller = RetryController()

        result = await controller.execute(
            lambda sampling: call_service(prompt, sampling),
            context="questions",
        )
    """

    def __init__(
        self,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        sleep: SleepFn = asyncio.sleep,
        sampling_policy: SamplingPolicy | None = None,
    ):
        self._settings = settings or get_settings()
        self._rng = rng or random.Random(self._settings.RANDOM_SEED)
        self._sleep = sleep
        self._sampling = sampling_policy or SamplingPolicy(self._rng)

        self.max_attempts = self._settings.RETRY_MAX_ATTEMPTS
        self.base_delay = self._settings.RETRY_BASE_DELAY_SECONDS
        self.jitter = self._settings.RETRY_JITTER_SECONDS
        self.timeout = self._settings.REQUEST_TIMEOUT_SECONDS

    def _wait_strategy(self) -> wait_base:
        return wait_incrementing(start=self.base_delay, increment=self.base_delay) + wait_seeded_jitter(
            self._rng, self.jitter
        )

    async def execute(
        self,
        attempt_fn: AttemptFn[T],
        max_attempts: int | None = None,
        context: str = "generation",
    ) -> T:
        """
        Run ``attempt_fn`` with retries.

        Args:
            attempt_fn: One full generate-and-parse cycle; receives the
                sampling parameters drawn for this attempt
            max_attempts: Override for the configured attempt limit
            context: Label for logs and error diagnostics

        Returns:
            The first successful result

        Raises:
            ClassifiedError: When all attempts fail
        """
        attempts = self.max_attempts if max_attempts is None else max_attempts
        if attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        retrying = AsyncRetrying(
            sleep=self._sleep,
            stop=stop_after_attempt(attempts),
            wait=self._wait_strategy(),
            retry=retry_if_not_exception_type(ConfigurationError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    sampling = self._sampling.next()
                    number = attempt.retry_state.attempt_number
                    logger.debug(f"{context}: attempt {number}/{attempts} with {sampling.to_dict()}")
                    result = await self._run_attempt(attempt_fn, sampling)
        except Exception as e:
            raise classify(e, f"{context} ({attempts} attempts)") from e

        return result

    async def _run_attempt(self, attempt_fn: AttemptFn[T], sampling: SamplingConfig) -> T:
        """Run one attempt under the per-attempt timeout."""
        try:
            return await asyncio.wait_for(attempt_fn(sampling), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise LLMTimeoutError(self.timeout) from e
