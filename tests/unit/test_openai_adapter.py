import asyncio
import base64
import json
from types import SimpleNamespace

import pytest

from app.domain.errors import LlmError
from app.domain.parsing import parse_product
from app.infra.llm.openai_adapter import OpenAIVisionLlm


class FakeCompletions:
    def __init__(self, content="{}", exc=None):
        self.content = content
        self.exc = exc
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.exc:
            raise self.exc
        msg = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=msg)])


def _llm(completions):
    return OpenAIVisionLlm(client=SimpleNamespace(chat=SimpleNamespace(completions=completions)))

def test_sends_image_as_data_url():
    comp = FakeCompletions(content='{"name": "Sok"}')
    out = asyncio.run(_llm(comp).describe_label(b"\xff\xd8jpeg"))
    assert out == '{"name": "Sok"}'

    msgs = comp.kwargs["messages"]
    assert msgs[0]["role"] == "system"
    assert "Polish" in msgs[0]["content"]
    image_part = msgs[1]["content"][1]
    assert image_part["type"] == "image_url"
    url = image_part["image_url"]["url"]
    assert url.startswith("data:image/jpeg;base64,")
    assert base64.b64decode(url.split(",", 1)[1]) == b"\xff\xd8jpeg"
    assert comp.kwargs["max_tokens"] == 500

def test_empty_content_raises():
    with pytest.raises(LlmError) as ei:
        asyncio.run(_llm(FakeCompletions(content="")).describe_label(b"x"))
    assert ei.value.message == "No content in model response"

def test_client_failure_wrapped():
    with pytest.raises(LlmError):
        asyncio.run(_llm(FakeCompletions(exc=RuntimeError("429"))).describe_label(b"x"))

def test_dev_mode_returns_offline_sample(monkeypatch):
    monkeypatch.setenv("DEV_MODE", "1")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    llm = OpenAIVisionLlm()
    assert not llm.configured()
    out = asyncio.run(llm.describe_label(b"x"))
    assert parse_product(out).name == "Sample Product (offline)"
    assert json.loads(out)["price"] is None
