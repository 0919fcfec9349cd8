# novelfactory/models.py
from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class TemplateName(str, Enum):
    OUTLINE = "outline"
    CHAPTERS = "chapters"
    WRITING = "writing"
    ANALYSIS = "analysis"
    IMPROVEMENT = "improvement"
    MANUAL_IMPROVEMENT = "manualImprovement"
    RANDOM_IDEA = "randomIdea"
    BOOK_TITLE = "bookTitle"


class Step(str, Enum):
    SETUP = "setup"
    OUTLINE = "outline"
    CHAPTERS = "chapters"
    WRITING = "writing"
    EXPORT = "export"


class Provider(str, Enum):
    OPENROUTER = "openrouter"
    OPENAI = "openai"


class ChapterStatus(str, Enum):
    EMPTY = "empty"
    DRAFT = "draft"
    IMPROVED = "improved"


# steps that may carry their own model when advanced models are enabled
MODEL_STEPS = ("outline", "chapters", "writing", "feedback", "randomIdea", "bookTitle")


class _CamelModel(BaseModel):
    # project / settings export files use camelCase keys
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )


class ChapterRecord(_CamelModel):
    number: int = Field(..., ge=1)
    content: str = ""
    status: ChapterStatus = ChapterStatus.EMPTY

    @property
    def word_count(self) -> int:
        return len(self.content.split())


class Book(_CamelModel):
    id: str = "current"
    title: str = ""
    blurb: str = ""
    genre: str = ""
    target_audience: str = ""
    premise: str = ""
    style_direction: str = ""
    num_chapters: int = Field(20, ge=1)
    target_word_count: int = Field(2000, ge=1)
    outline: str = ""
    chapter_outline: str = ""
    chapters: List[ChapterRecord] = []
    current_step: Step = Step.SETUP
    created_at: dt.datetime = Field(default_factory=_now)
    last_saved: dt.datetime = Field(default_factory=_now)

    @field_validator("chapters", mode="before")
    @classmethod
    def _plain_text_chapters(cls, value: Any) -> Any:
        """Accept exported chapters as a plain list of strings (holes allowed)."""
        if not isinstance(value, list):
            return value
        out = []
        for i, item in enumerate(value, 1):
            if item is None or isinstance(item, str):
                text = item or ""
                out.append({
                    "number": i,
                    "content": text,
                    "status": ChapterStatus.DRAFT if text.strip() else ChapterStatus.EMPTY,
                })
            else:
                out.append(item)
        return out

    @field_validator("current_step", mode="before")
    @classmethod
    def _known_step(cls, value: Any) -> Any:
        # exports may name UI-only pages (settings, projects...) as the step
        if isinstance(value, str) and value not in {s.value for s in Step}:
            return Step.SETUP
        return value

    def chapter(self, number: int) -> ChapterRecord | None:
        for ch in self.chapters:
            if ch.number == number:
                return ch
        return None

    def chapter_text(self, number: int) -> str:
        ch = self.chapter(number)
        return ch.content if ch else ""

    def set_chapter(
        self, number: int, text: str, status: ChapterStatus = ChapterStatus.DRAFT
    ) -> ChapterRecord:
        if number < 1:
            raise ValueError("chapter numbers start at 1")
        ch = self.chapter(number)
        if ch is None:
            have = {c.number for c in self.chapters}
            records = list(self.chapters)
            records += [ChapterRecord(number=n) for n in range(1, number) if n not in have]
            ch = ChapterRecord(number=number)
            records.append(ch)
            self.chapters = sorted(records, key=lambda c: c.number)
            ch = self.chapter(number)
        ch.content = text
        ch.status = status if text.strip() else ChapterStatus.EMPTY
        return ch

    def completed_chapters(self) -> List[ChapterRecord]:
        return [c for c in self.chapters if c.content.strip()]

    def has_content(self) -> bool:
        return bool(self.premise or self.outline or self.chapter_outline)

    def touch(self) -> None:
        self.last_saved = _now()

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Settings(_CamelModel):
    api_provider: Provider = Provider.OPENROUTER
    openrouter_api_key: str = ""
    openai_api_key: str = ""
    model: str = "anthropic/claude-sonnet-4"
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(50000, ge=1)
    advanced_models_enabled: bool = False
    advanced_models: Dict[str, str] = {}
    custom_prompts: Dict[str, str] = {}

    def api_key(self) -> str:
        if self.api_provider is Provider.OPENROUTER:
            return self.openrouter_api_key
        return self.openai_api_key

    def prompt_for(self, name: TemplateName | str) -> str | None:
        """User override for *name*, or None when the built-in applies."""
        key = name.value if isinstance(name, TemplateName) else name
        text = self.custom_prompts.get(key) or ""
        return text if text.strip() else None

    def model_for(self, step: str | None = None) -> str:
        if step and self.advanced_models_enabled and self.advanced_models.get(step):
            return self.advanced_models[step]
        return self.model

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
