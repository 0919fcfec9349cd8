# tests/test_catalog.py
import pytest

from novelfactory import catalog
from novelfactory.models import Book, Provider, Settings


def test_recommended_models_come_first():
    models = catalog.models_for("openrouter")
    assert models[0].value == "anthropic/claude-sonnet-4"
    short = catalog.models_for(Provider.OPENROUTER, include_more=False)
    assert len(short) == 3


def test_find_model():
    info = catalog.find_model("gpt-4o-mini", Provider.OPENAI)
    assert (info.input_cost, info.output_cost) == (0.15, 0.60)
    assert catalog.find_model("gpt-4o-mini", Provider.OPENROUTER) is None
    assert catalog.find_model("nope/nothing") is None


def test_estimate_tokens():
    assert catalog.estimate_tokens(700) == 1000
    assert catalog.estimate_tokens("one two three four five six seven") == 10


def test_cost_for():
    # 1M prompt tokens at $3 + 1M completion tokens at $15
    assert catalog.cost_for("anthropic/claude-sonnet-4", 1_000_000, 1_000_000) == pytest.approx(18.0)
    assert catalog.cost_for("unknown", 1000, 1000) == 0.0


def test_free_model_costs_nothing():
    settings = Settings(model="deepseek/deepseek-chat-v3-0324:free")
    cost = catalog.estimate_book_cost(Book(premise="p"), settings)
    assert cost.total == 0.0


def test_book_cost_grows_with_chapters():
    settings = Settings()
    small = catalog.estimate_book_cost(Book(premise="p", num_chapters=5), settings)
    big = catalog.estimate_book_cost(Book(premise="p", num_chapters=30), settings)
    assert 0 < small.total < big.total
    assert small.outputs > 0


def test_step_model_changes_estimate():
    base = Settings()
    cheap_writer = Settings(
        advanced_models_enabled=True,
        advanced_models={"writing": "openai/gpt-5-nano"},
    )
    book = Book(premise="p", num_chapters=20)
    assert catalog.estimate_book_cost(book, cheap_writer).total < catalog.estimate_book_cost(book, base).total
