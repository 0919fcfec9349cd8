# tests/test_models.py
import pydantic
import pytest

from novelfactory.models import Book, ChapterStatus, Provider, Settings, Step


def test_book_roundtrip_uses_camel_case():
    book = Book(genre="mystery", target_audience="adult", premise="A body in the library.", num_chapters=12)
    book.set_chapter(2, "It was raining.")
    raw = book.to_json()
    assert raw["targetAudience"] == "adult"
    assert raw["numChapters"] == 12
    assert raw["chapters"][1] == {"number": 2, "content": "It was raining.", "status": "draft"}
    again = Book.model_validate(raw)
    assert again.chapter_text(2) == "It was raining."
    assert again.created_at == book.created_at


def test_exported_project_imports():
    raw = {
        "id": "project_1700000000000",
        "genre": "romance",
        "targetAudience": "new-adult",
        "premise": "Two rival bakers.",
        "styleDirection": "Warm",
        "numChapters": 3,
        "targetWordCount": 1800,
        "chapters": ["First chapter text", None, ""],
        "currentStep": "projects",
        "createdAt": "2025-01-01T10:00:00.000Z",
        "lastSaved": "2025-01-02T10:00:00.000Z",
    }
    book = Book.model_validate(raw)
    assert book.current_step is Step.SETUP
    assert [c.number for c in book.chapters] == [1, 2, 3]
    assert book.chapter(1).status is ChapterStatus.DRAFT
    assert book.chapter(2).status is ChapterStatus.EMPTY
    assert [c.number for c in book.completed_chapters()] == [1]


def test_set_chapter_fills_gaps():
    book = Book()
    book.set_chapter(3, "third")
    assert [c.number for c in book.chapters] == [1, 2, 3]
    assert book.chapter(3).status is ChapterStatus.DRAFT
    book.set_chapter(1, "first", ChapterStatus.IMPROVED)
    assert book.chapter(1).status is ChapterStatus.IMPROVED
    book.set_chapter(3, "  ")
    assert book.chapter(3).status is ChapterStatus.EMPTY
    with pytest.raises(ValueError):
        book.set_chapter(0, "zero")


def test_word_count():
    book = Book()
    book.set_chapter(1, "one two  three\nfour")
    assert book.chapter(1).word_count == 4


def test_invalid_chapter_count():
    with pytest.raises(pydantic.ValidationError):
        Book(num_chapters=0)
    book = Book()
    with pytest.raises(pydantic.ValidationError):
        book.num_chapters = -1


def test_has_content():
    assert not Book().has_content()
    assert Book(premise="x").has_content()


def test_settings_api_key_follows_provider():
    s = Settings(openrouter_api_key="or-key", openai_api_key="oa-key")
    assert s.api_key() == "or-key"
    s.api_provider = Provider.OPENAI
    assert s.api_key() == "oa-key"


def test_settings_step_models():
    s = Settings(model="openai/gpt-5", advanced_models={"writing": "x-ai/grok-4"})
    assert s.model_for("writing") == "openai/gpt-5"
    s.advanced_models_enabled = True
    assert s.model_for("writing") == "x-ai/grok-4"
    assert s.model_for("outline") == "openai/gpt-5"


def test_settings_prompt_for():
    s = Settings(custom_prompts={"outline": "mine", "writing": "  "})
    assert s.prompt_for("outline") == "mine"
    assert s.prompt_for("writing") is None
    assert s.prompt_for("analysis") is None


def test_settings_from_camel_case_export():
    s = Settings.model_validate({"apiProvider": "openai", "maxTokens": 4000, "temperature": 1.2})
    assert s.api_provider is Provider.OPENAI
    assert s.max_tokens == 4000
    with pytest.raises(pydantic.ValidationError):
        Settings(temperature=3)
