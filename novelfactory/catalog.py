# novelfactory/catalog.py
"""
Selectable models per provider with their prices (USD / 1M tokens) and a
rough cost estimate for generating a whole book.
"""

from __future__ import annotations

from typing import Dict, List, NamedTuple

from novelfactory.models import Book, Provider, Settings


class ModelInfo(NamedTuple):
    value: str
    label: str
    input_cost: float
    output_cost: float


class CostEstimate(NamedTuple):
    inputs: float
    outputs: float

    @property
    def total(self) -> float:
        return self.inputs + self.outputs


M = ModelInfo

API_MODELS: Dict[Provider, Dict[str, List[ModelInfo]]] = {
    Provider.OPENROUTER: {
        "Recommended": [
            M("anthropic/claude-sonnet-4", "Claude Sonnet 4", 3.00, 15.00),
            M("anthropic/claude-opus-4.1", "Claude Opus 4.1", 15.00, 75.00),
            M("openai/gpt-5", "GPT-5", 1.25, 10.00),
        ],
        "More": [
            M("openai/gpt-4o", "GPT-4o", 5.00, 15.00),
            M("anthropic/claude-3.7-sonnet:thinking", "Claude Sonnet 3.7 (Thinking)", 3.00, 15.00),
            M("google/gemini-2.5-pro", "Gemini 2.5 Pro", 1.25, 10.00),
            M("x-ai/grok-4", "Grok 4", 3.00, 15.00),
            M("perplexity/sonar-reasoning-pro", "Sonar Reasoning Pro", 2.00, 8.00),
            M("openai/gpt-5-mini", "GPT-5 Mini", 0.25, 2.00),
            M("openai/gpt-4o-mini", "GPT-4o Mini", 0.15, 0.60),
            M("openai/gpt-5-nano", "GPT-5 Nano", 0.05, 0.40),
            M("google/gemini-2.5-flash", "Gemini 2.5 Flash", 0.30, 2.50),
            M("deepseek/deepseek-chat-v3-0324", "DeepSeek Chat V3", 0.18, 0.72),
            M("deepseek/deepseek-chat-v3-0324:free", "DeepSeek V3: FREE", 0.00, 0.00),
            M("openai/gpt-oss-20b:free", "OpenAI GPT-OSS 20B: FREE", 0.00, 0.00),
            M("thedrummer/anubis-70b-v1.1t", "Anubis 70B V1.1T", 0.40, 0.70),
            M("microsoft/wizardlm-2-8x22b", "WizardLM 2-8x22B", 0.48, 0.48),
        ],
    },
    Provider.OPENAI: {
        "Recommended": [
            M("gpt-5", "GPT-5", 1.25, 10.00),
            M("gpt-4o", "GPT-4o", 5.00, 15.00),
        ],
        "More": [
            M("gpt-4o-mini", "GPT-4o Mini", 0.15, 0.60),
            M("gpt-5-mini", "GPT-5 Mini", 0.25, 2.00),
        ],
    },
}

# rough: 0.7 words ≈ 1 token
WORDS_PER_TOKEN = 0.7
# prompt scaffolding around the book content, in tokens
PROMPT_OVERHEAD = 800
OUTLINE_WORDS = 1500
CHAPTER_PLAN_WORDS_PER_CHAPTER = 250
TITLE_BLURB_WORDS = 250


def models_for(provider: Provider | str, include_more: bool = True) -> List[ModelInfo]:
    groups = API_MODELS[Provider(provider)]
    out = list(groups["Recommended"])
    if include_more:
        out += groups["More"]
    return out


def find_model(model_id: str, provider: Provider | str | None = None) -> ModelInfo | None:
    providers = [Provider(provider)] if provider else list(API_MODELS)
    for p in providers:
        for info in models_for(p):
            if info.value == model_id:
                return info
    return None


def estimate_tokens(text_or_words: str | int) -> int:
    words = text_or_words if isinstance(text_or_words, int) else len(text_or_words.split())
    return int(words / WORDS_PER_TOKEN)


def cost_for(model_id: str, prompt_tokens: int, completion_tokens: int) -> float:
    info = find_model(model_id)
    if info is None:
        return 0.0
    return (prompt_tokens * info.input_cost + completion_tokens * info.output_cost) / 1_000_000


def estimate_book_cost(book: Book, settings: Settings) -> CostEstimate:
    """
    Ballpark the price of a full run: outline, chapter plan, title/blurb and
    every chapter, each on the model its step would use.
    """
    n = book.num_chapters
    premise = estimate_tokens(book.premise) + estimate_tokens(book.style_direction)
    outline = estimate_tokens(OUTLINE_WORDS)
    plan = estimate_tokens(CHAPTER_PLAN_WORDS_PER_CHAPTER * n)
    title = estimate_tokens(TITLE_BLURB_WORDS)
    chapter = estimate_tokens(book.target_word_count)

    # (step, prompt tokens, completion tokens, calls)
    calls = [
        ("outline", PROMPT_OVERHEAD + premise, outline, 1),
        ("chapters", PROMPT_OVERHEAD + premise + outline, plan, 1),
        ("bookTitle", PROMPT_OVERHEAD + premise + outline + plan, title, 1),
        ("writing", PROMPT_OVERHEAD + premise + outline + plan + chapter, chapter, n),
    ]

    inputs = outputs = 0.0
    for step, p_tok, c_tok, times in calls:
        info = find_model(settings.model_for(step))
        if info is None:
            continue
        inputs += times * p_tok * info.input_cost / 1_000_000
        outputs += times * c_tok * info.output_cost / 1_000_000
    return CostEstimate(round(inputs, 4), round(outputs, 4))
