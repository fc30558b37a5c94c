"""
Vision tools package

Re-exports the provider interface, implementations and the reply parser,
so callers can do:

    from capture_inventory.tools.vision import (
        VisionProvider,
        OpenAIVisionProvider,
        ScriptedVisionProvider,
        parse_vision_reply,
    )
"""

from __future__ import annotations

from .instructions import SYSTEM_PROMPT, build_messages
from .openai_provider import OpenAIVisionProvider
from .provider_base import VisionProvider, extract_json_object, parse_vision_reply
from .scripted_provider import ScriptedVisionProvider, reply_text

__all__ = [
    "VisionProvider",
    "OpenAIVisionProvider",
    "ScriptedVisionProvider",
    "SYSTEM_PROMPT",
    "build_messages",
    "extract_json_object",
    "parse_vision_reply",
    "reply_text",
]
