# capture_inventory/tools/vision/provider_base.py
"""
Vision Provider Interface

Purpose
-------
Define a minimal, provider-agnostic contract for image analysis and the one
reply parser every provider shares.

Public API
----------
class VisionProvider(Protocol):
    async def analyze(self, data: bytes, mime_type: str) -> VisionResult

def extract_json_object(text: str) -> dict | None
def parse_vision_reply(text: str) -> VisionResult

Invariants & Guardrails
-----------------------
- The reply is free text; the first balanced `{...}` substring that parses as a
  JSON object wins. Braces inside JSON strings do not count toward balance.
- No JSON object anywhere -> ParseError. `items` that is not a list -> ParseError.
- Individual items that fail validation (e.g. no name) are dropped, not fatal.
- Providers never retry; the orchestrator owns the retry policy.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from typing import Any, Protocol

from pydantic import ValidationError

from capture_inventory.core.errors import ParseError
from capture_inventory.schemas.models import DetectedItem, VisionResult

logger = logging.getLogger(__name__)


class VisionProvider(Protocol):
    async def analyze(self, data: bytes, mime_type: str) -> VisionResult: ...


# ---------- balanced-object extraction ----------


def _balanced_end(s: str, start: int) -> int | None:
    depth = 0
    in_str = False
    escaped = False
    for i in range(start, len(s)):
        ch = s[i]
        if in_str:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_str = False
            continue
        if ch == '"':
            in_str = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
    return None


def iter_balanced_objects(text: str) -> Iterator[str]:
    """Yield every balanced `{...}` substring, ordered by start position."""
    start = text.find("{")
    while start != -1:
        end = _balanced_end(text, start)
        if end is not None:
            yield text[start:end]
        start = text.find("{", start + 1)


def extract_json_object(text: str) -> dict[str, Any] | None:
    for candidate in iter_balanced_objects(text):
        try:
            loaded = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(loaded, dict):
            return loaded
    return None


# ---------- reply parsing ----------


def parse_vision_reply(text: str) -> VisionResult:
    if not isinstance(text, str):
        raise ParseError("Vision service returned a non-string reply.")

    obj = extract_json_object(text)
    if obj is None:
        preview = text.strip()[:120]
        raise ParseError(f"No JSON object found in vision reply: {preview!r}")

    raw_items = obj.get("items")
    if raw_items is None:
        raw_items = []
    if not isinstance(raw_items, list):
        raise ParseError("Vision reply field 'items' is not a list.")

    items: list[DetectedItem] = []
    for idx, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            continue
        try:
            items.append(DetectedItem.model_validate(raw))
        except ValidationError as e:
            logger.debug("dropping vision item #%d: %s", idx, e.errors()[0].get("msg", e))

    summary = obj.get("summary")
    return VisionResult(summary=str(summary).strip() if summary else "", items=items)


__all__ = ["VisionProvider", "iter_balanced_objects", "extract_json_object", "parse_vision_reply"]
