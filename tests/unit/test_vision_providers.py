# tests/unit/test_vision_providers.py
"""
Vision providers (no network)

Purpose
-------
- OpenAIVisionProvider fails fast without OPENAI_API_KEY.
- Its reply handling and error mapping work against a stub client.
- ScriptedVisionProvider replays replies through the same parser.
"""

import asyncio
import importlib
from types import SimpleNamespace

import pytest

from capture_inventory.core.errors import ParseError, ServiceError
from capture_inventory.settings import PipelineSettings
from capture_inventory.tools.vision import SYSTEM_PROMPT, ScriptedVisionProvider, build_messages, reply_text
from tests.utils import PLATE_SET, SOFA


class _StubCompletions:
    def __init__(self, content=None, exc=None):
        self.content = content
        self.exc = exc
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.exc is not None:
            raise self.exc
        msg = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=msg)])


def _provider_with(monkeypatch, completions):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    mod = importlib.import_module("capture_inventory.tools.vision.openai_provider")
    prov = mod.OpenAIVisionProvider(PipelineSettings(vision_model="gpt-4o-mini", vision_timeout_s=7))
    prov._client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return prov


def test_openai_provider_requires_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    mod = importlib.import_module("capture_inventory.tools.vision.openai_provider")
    with pytest.raises(RuntimeError):
        mod.OpenAIVisionProvider()


def test_openai_provider_parses_reply(monkeypatch):
    completions = _StubCompletions(content="Here you go: " + reply_text([SOFA], summary="A sofa"))
    prov = _provider_with(monkeypatch, completions)
    res = asyncio.run(prov.analyze(b"\x89PNG", "image/png"))
    assert res.summary == "A sofa"
    assert completions.kwargs["model"] == "gpt-4o-mini"
    assert completions.kwargs["timeout"] == 7
    image_part = completions.kwargs["messages"][1]["content"][1]
    assert image_part["image_url"]["url"].startswith("data:image/png;base64,")


def test_openai_provider_empty_reply_is_parse_error(monkeypatch):
    prov = _provider_with(monkeypatch, _StubCompletions(content="   "))
    with pytest.raises(ParseError):
        asyncio.run(prov.analyze(b"x", "image/jpeg"))


def test_openai_provider_transport_failure_is_service_error(monkeypatch):
    prov = _provider_with(monkeypatch, _StubCompletions(exc=ConnectionError("connection reset")))
    with pytest.raises(ServiceError):
        asyncio.run(prov.analyze(b"x", "image/jpeg"))


def test_messages_carry_system_prompt_and_image():
    msgs = build_messages(b"abc", "image/webp")
    assert msgs[0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert msgs[1]["content"][1]["image_url"]["url"] == "data:image/webp;base64,YWJj"


def test_scripted_sequence_repeats_last_reply():
    prov = ScriptedVisionProvider([TimeoutError("slow"), reply_text([PLATE_SET])])

    async def _run():
        with pytest.raises(TimeoutError):
            await prov.analyze(b"1", "image/jpeg")
        first = await prov.analyze(b"22", "image/jpeg")
        second = await prov.analyze(b"333", "image/png")
        return first, second

    first, second = asyncio.run(_run())
    assert first.items[0].name == second.items[0].name == "Plate Set"
    assert prov.calls == [(1, "image/jpeg"), (2, "image/jpeg"), (3, "image/png")]


def test_scripted_callable_reply_sees_payload():
    prov = ScriptedVisionProvider(lambda data, mime: reply_text([{"name": data.decode()}]))
    res = asyncio.run(prov.analyze(b"Kettle", "image/jpeg"))
    assert res.items[0].name == "Kettle"
