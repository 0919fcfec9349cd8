"""
openai-python ≥1.0 wrapper for both providers
(OpenRouter speaks the same chat-completions API on another base URL)
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Dict, List

import openai
from openai import OpenAI
from rich import print

from novelfactory import catalog, config
from novelfactory.errors import LLMError, MissingApiKey
from novelfactory.models import Provider, Settings

logger = logging.getLogger(__name__)

_COST_HEADER = "ts,model,prompt_tokens,completion_tokens,cost\n"


def cost_log_file() -> Path:
    return config.home_dir() / "costs.csv"


def _log_cost(model: str, p: int, c: int) -> float:
    cost = catalog.cost_for(model, p, c)
    log = cost_log_file()
    log.parent.mkdir(parents=True, exist_ok=True)
    if not log.exists():
        log.write_text(_COST_HEADER, encoding="utf-8")
    with log.open("a", encoding="utf-8") as f:
        f.write(f"{int(time.time())},{model},{p},{c},{cost:.6f}\n")
    print(f"[grey50][LLM] {model}  p={p}  c={c}  →  ${cost:.4f}[/]")
    return cost


def make_client(settings: Settings) -> OpenAI:
    key = settings.api_key()
    if not key:
        raise MissingApiKey(
            f"No API key for {settings.api_provider.value}; set it with "
            "`novelfactory settings --api-key` or in the environment."
        )
    if settings.api_provider is Provider.OPENROUTER:
        return OpenAI(
            api_key=key,
            base_url=config.OPENROUTER_BASE_URL,
            default_headers={"HTTP-Referer": config.APP_URL, "X-Title": config.APP_TITLE},
        )
    return OpenAI(api_key=key)


def build_messages(prompt: str, system_prompt: str = "") -> List[Dict[str, str]]:
    messages = [{"role": "user", "content": prompt}]
    if system_prompt:
        messages.insert(0, {"role": "system", "content": system_prompt})
    return messages


def call_llm(
    prompt: str,
    *,
    settings: Settings,
    system_prompt: str = "",
    model: str | None = None,
    dry_run: bool = False,
) -> str:
    """
    Execute a chat completion and return the assistant's message text.

    `dry_run=True` prints a size estimate and returns "" without calling the API.
    """
    model = model or settings.model
    messages = build_messages(prompt, system_prompt)

    if dry_run:
        char_len = sum(len(m["content"]) for m in messages)
        print(f"[yellow][dry-run] Would call {model} with ~{char_len} characters[/]")
        return ""

    client = make_client(settings)
    params = dict(model=model, messages=messages, temperature=settings.temperature)
    # gpt-5 on the OpenAI endpoint only accepts max_completion_tokens
    if settings.api_provider is Provider.OPENAI and "gpt-5" in model:
        params["max_completion_tokens"] = settings.max_tokens
    else:
        params["max_tokens"] = settings.max_tokens

    logger.debug("chat.completions model=%s prompt_chars=%d", model, len(prompt))
    try:
        response = client.chat.completions.create(**params)
    except openai.OpenAIError as e:
        raise LLMError(f"API call failed: {e}") from e

    usage = response.usage  # prompt_tokens, completion_tokens
    if usage is not None:
        _log_cost(model, usage.prompt_tokens, usage.completion_tokens)

    content = response.choices[0].message.content if response.choices else None
    if content is None:
        raise LLMError("API call failed: empty response")
    return content
