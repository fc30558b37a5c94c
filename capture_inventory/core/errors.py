"""
Typed errors + utilities for the capture analysis pipeline.

Exports
-------
- PipelineError, NotFoundError, ServiceError, ParseError, PersistenceError,
  InvalidTransitionError
- PIPELINE_ERRORS, RETRYABLE_ERRORS
- classify_pipeline_error(exc, stage)
- pipeline_error_guard(stage)
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Literal

from pydantic import ValidationError

Stage = Literal["capture", "vision", "inventory", "spreadsheet", "project"]

# =========================
# Exception types
# =========================


class PipelineError(RuntimeError):
    """Base class for capture analysis failures."""


class NotFoundError(PipelineError):
    """The capture does not exist under the requested ownership scope."""


class ServiceError(PipelineError):
    """The vision service call failed, returned a non-success status, or timed out."""


class ParseError(PipelineError):
    """The vision reply held no extractable JSON object of the expected shape."""


class PersistenceError(PipelineError):
    """A store read or write failed."""


class InvalidTransitionError(PipelineError):
    """An analysis status change outside pending -> processing -> completed|failed."""


# Selector tuples for grouped exception handling
PIPELINE_ERRORS = (
    NotFoundError,
    ServiceError,
    ParseError,
    PersistenceError,
    InvalidTransitionError,
)
RETRYABLE_ERRORS = (ServiceError, PersistenceError)

# =========================
# Classification helpers
# =========================


def classify_pipeline_error(exc: Exception, stage: Stage) -> PipelineError:
    """
    Map an arbitrary exception raised inside one pipeline stage to a typed PipelineError.

    Heuristics:
      - Any PipelineError subclass -> passed through
      - vision stage:
          - json/pydantic decode failures -> ParseError
          - timeouts, openai/httpx transport errors and anything else -> ServiceError
      - store stages: timeouts and everything else -> PersistenceError
    """
    if isinstance(exc, PipelineError):
        return exc

    msg = f"{type(exc).__name__}: {exc}"
    is_timeout = isinstance(exc, asyncio.TimeoutError | TimeoutError)

    if stage == "vision":
        if is_timeout:
            return ServiceError(f"vision service timed out ({msg})")
        if isinstance(exc, json.JSONDecodeError | ValidationError):
            return ParseError(msg)
        return ServiceError(msg)

    if is_timeout:
        return PersistenceError(f"{stage} store timed out ({msg})")
    return PersistenceError(f"{stage} store failed ({msg})")


@contextmanager
def pipeline_error_guard(stage: Stage) -> Iterator[None]:
    """Context manager to normalize unexpected exceptions from one stage."""
    try:
        yield
    except PIPELINE_ERRORS:
        raise
    except Exception as exc:  # noqa: BLE001
        raise classify_pipeline_error(exc, stage) from exc


__all__ = [
    "Stage",
    "PipelineError",
    "NotFoundError",
    "ServiceError",
    "ParseError",
    "PersistenceError",
    "InvalidTransitionError",
    "PIPELINE_ERRORS",
    "RETRYABLE_ERRORS",
    "classify_pipeline_error",
    "pipeline_error_guard",
]
