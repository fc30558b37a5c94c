# capture_inventory/tools/vision/openai_provider.py
"""
OpenAI Vision Provider

Purpose
-------
Production `VisionProvider` using OpenAI multimodal chat completions. One
request per image: fixed system instructions plus the image as a base64 data
URL. The reply text goes through `parse_vision_reply`.

Environment
-----------
OPENAI_API_KEY : required
Model, timeout, max tokens and temperature come from `PipelineSettings`
(CAPINV_VISION_* variables).

Errors
------
- Transport failures, non-success statuses and timeouts -> ServiceError
- Empty or non-JSON replies -> ParseError
No retry here; the SDK's own retries are disabled so the orchestrator's policy
is the only one in effect.
"""

from __future__ import annotations

import logging
import os

from capture_inventory.core.errors import ParseError, pipeline_error_guard
from capture_inventory.schemas.models import VisionResult
from capture_inventory.settings import PipelineSettings, load_settings

from .instructions import build_messages
from .provider_base import VisionProvider, parse_vision_reply

logger = logging.getLogger(__name__)


class OpenAIVisionProvider(VisionProvider):
    def __init__(self, settings: PipelineSettings | None = None) -> None:
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise RuntimeError("OPENAI_API_KEY not set for OpenAIVisionProvider.")
        try:
            from openai import AsyncOpenAI
        except Exception as e:
            raise RuntimeError("OpenAI SDK not available. Install `openai>=1.0`.") from e

        self._settings = settings or load_settings()
        self._client = AsyncOpenAI(api_key=api_key, max_retries=0)

    async def analyze(self, data: bytes, mime_type: str) -> VisionResult:
        s = self._settings
        with pipeline_error_guard("vision"):
            resp = await self._client.chat.completions.create(
                model=s.vision_model,
                messages=build_messages(data, mime_type),  # type: ignore[arg-type]
                max_tokens=s.vision_max_tokens,
                temperature=s.vision_temperature,
                timeout=s.vision_timeout_s,
            )
        content = resp.choices[0].message.content if resp.choices else None
        if not content or not content.strip():
            raise ParseError("No content returned from the vision service.")
        logger.debug("vision reply: %d chars", len(content))
        return parse_vision_reply(content)


__all__ = ["OpenAIVisionProvider"]
