# capture_inventory/tools/vision/scripted_provider.py
"""
Scripted Vision Provider

Purpose
-------
Deterministic, network-free provider that replays canned reply text through the
same `parse_vision_reply` path as the production provider. This lets us:
  - Run the CLI demo and the test suite without an API key.
  - Exercise ParseError / ServiceError handling with exact replies.
  - Interleave concurrent runs via an optional per-call delay.

Usage
-----
prov = ScriptedVisionProvider('{"summary": "one sofa", "items": [{"name": "Sofa", "category": "furniture"}]}')
result = await prov.analyze(b"...", "image/jpeg")

A reply may also be an Exception instance (raised on call) or a callable
`(data, mime_type) -> str | Exception` to script per-image behaviour.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable, Sequence
from typing import Any

from capture_inventory.schemas.models import VisionResult

from .provider_base import VisionProvider, parse_vision_reply

Reply = str | BaseException
ReplyFn = Callable[[bytes, str], Reply]


class ScriptedVisionProvider(VisionProvider):
    """Replays `reply` for every call (or one entry of a sequence per call, last one repeating)."""

    def __init__(self, reply: Reply | Sequence[Reply] | ReplyFn, *, delay_s: float = 0.0) -> None:
        self._reply = reply
        self._delay_s = delay_s
        self.calls: list[tuple[int, str]] = []

    def _next_reply(self, data: bytes, mime_type: str) -> Reply:
        r = self._reply
        if callable(r) and not isinstance(r, BaseException):
            return r(data, mime_type)
        if isinstance(r, str | BaseException):
            return r
        seq = list(r)
        return seq[min(len(self.calls) - 1, len(seq) - 1)]

    async def analyze(self, data: bytes, mime_type: str) -> VisionResult:
        self.calls.append((len(data), mime_type))
        if self._delay_s:
            await asyncio.sleep(self._delay_s)
        reply = self._next_reply(data, mime_type)
        if isinstance(reply, BaseException):
            raise reply
        return parse_vision_reply(reply)


def reply_text(items: Sequence[dict[str, Any]], summary: str = "", *, prose: str = "") -> str:
    """Build a reply in the service's shape, optionally wrapped in prose."""
    body = json.dumps({"summary": summary, "items": list(items)})
    return f"{prose}\n{body}\n" if prose else body


__all__ = ["ScriptedVisionProvider", "reply_text"]
