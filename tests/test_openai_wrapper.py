# tests/test_openai_wrapper.py
from types import SimpleNamespace

import pytest

from novelfactory.errors import LLMError, MissingApiKey
from novelfactory.llm import openai_wrapper
from novelfactory.models import Provider, Settings


class FakeCompletions:
    def __init__(self, content="Hello.", usage=(10, 5)):
        self.content = content
        self.usage = usage
        self.params = None

    def create(self, **params):
        self.params = params
        usage = SimpleNamespace(prompt_tokens=self.usage[0], completion_tokens=self.usage[1])
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(usage=usage, choices=[SimpleNamespace(message=message)])


@pytest.fixture
def completions(monkeypatch, tmp_path):
    monkeypatch.setenv("NOVELFACTORY_HOME", str(tmp_path))
    fake = FakeCompletions()
    client = SimpleNamespace(chat=SimpleNamespace(completions=fake))
    monkeypatch.setattr(openai_wrapper, "make_client", lambda settings: client)
    return fake


def test_messages_with_system_prompt():
    assert openai_wrapper.build_messages("hi", "be nice") == [
        {"role": "system", "content": "be nice"},
        {"role": "user", "content": "hi"},
    ]
    assert openai_wrapper.build_messages("hi") == [{"role": "user", "content": "hi"}]


def test_call_llm(completions, tmp_path):
    settings = Settings(openrouter_api_key="k", temperature=0.2, max_tokens=1234)
    assert openai_wrapper.call_llm("Write.", settings=settings, system_prompt="sys") == "Hello."
    assert completions.params["model"] == "anthropic/claude-sonnet-4"
    assert completions.params["max_tokens"] == 1234
    assert completions.params["temperature"] == 0.2
    lines = (tmp_path / "costs.csv").read_text().splitlines()
    assert lines[0].startswith("ts,model")
    assert ",anthropic/claude-sonnet-4,10,5," in lines[1]


def test_gpt5_on_openai_uses_completion_tokens(completions):
    settings = Settings(api_provider=Provider.OPENAI, openai_api_key="k", model="gpt-5", max_tokens=99)
    openai_wrapper.call_llm("Write.", settings=settings)
    assert completions.params["max_completion_tokens"] == 99
    assert "max_tokens" not in completions.params


def test_step_model_override(completions):
    openai_wrapper.call_llm("Write.", settings=Settings(openrouter_api_key="k"), model="x-ai/grok-4")
    assert completions.params["model"] == "x-ai/grok-4"


def test_empty_reply_is_an_error(completions):
    completions.content = None
    with pytest.raises(LLMError):
        openai_wrapper.call_llm("Write.", settings=Settings(openrouter_api_key="k"))


def test_dry_run_needs_no_key(monkeypatch):
    monkeypatch.setattr(openai_wrapper, "make_client", pytest.fail)
    assert openai_wrapper.call_llm("Write.", settings=Settings(), dry_run=True) == ""


def test_missing_key():
    with pytest.raises(MissingApiKey):
        openai_wrapper.make_client(Settings(api_provider=Provider.OPENAI))


def test_openrouter_client_headers():
    client = openai_wrapper.make_client(Settings(openrouter_api_key="sk-or-test"))
    assert str(client.base_url).startswith("https://openrouter.ai/api/v1")
    assert client.default_headers["X-Title"] == "NovelFactory"
