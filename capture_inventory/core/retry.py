# capture_inventory/core/retry.py
"""
Bounded-timeout + fixed-retry wrapper shared by every I/O step.

Each attempt runs under `asyncio.wait_for(timeout_s)`; failures are normalized
through `pipeline_error_guard(stage)`. Only ServiceError/PersistenceError are
retried, with exponential backoff (backoff_s * 2**attempt, capped). Parse and
not-found errors surface on the first attempt.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field

from capture_inventory.core.errors import RETRYABLE_ERRORS, PipelineError, Stage, pipeline_error_guard

T = TypeVar("T")

logger = logging.getLogger(__name__)


class RetryPolicy(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    timeout_s: float = Field(15.0, gt=0, description="Upper bound for one attempt.")
    max_retries: int = Field(2, ge=0, description="Attempts after the first one.")
    backoff_s: float = Field(0.5, ge=0, description="Delay before the first retry; doubled per retry.")
    max_backoff_s: float = Field(4.0, ge=0, description="Cap on a single backoff delay.")

    def delay_for(self, attempt: int) -> float:
        return min(self.backoff_s * (2**attempt), self.max_backoff_s)


async def call_with_retry(fn: Callable[[], Awaitable[T]], policy: RetryPolicy, *, stage: Stage) -> T:
    """Await `fn()` under `policy`; raises the last typed error when attempts run out."""
    for attempt in range(policy.max_retries + 1):
        try:
            with pipeline_error_guard(stage):
                return await asyncio.wait_for(fn(), timeout=policy.timeout_s)
        except RETRYABLE_ERRORS as e:
            if attempt >= policy.max_retries:
                raise
            delay = policy.delay_for(attempt)
            logger.warning(
                "%s attempt %d/%d failed (%s); retrying in %.2fs",
                stage,
                attempt + 1,
                policy.max_retries + 1,
                e,
                delay,
            )
            await asyncio.sleep(delay)
    raise PipelineError(f"{stage}: no attempt was made")


__all__ = ["RetryPolicy", "call_with_retry"]
