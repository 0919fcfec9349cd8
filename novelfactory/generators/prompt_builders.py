"""
Prompt builders
• Named templates rendered against a flat context mapping.
• Act boundaries and genre guidance are derived from the book state.
• Unknown {tokens} are left in the output untouched.
• User overrides from Settings.custom_prompts win over the built-ins.
"""

from __future__ import annotations

import logging
import math
import re
from enum import Enum
from typing import Any, Dict, List, Mapping, NamedTuple

from novelfactory.errors import InvalidTemplate
from novelfactory.generators.genres import GENRE_REQUIREMENTS, GenreRequirement
from novelfactory.generators.parsers import extract_chapter_outline
from novelfactory.generators.templates import DEFAULT_PROMPTS, SYSTEM_PROMPTS
from novelfactory.models import Book, Settings, TemplateName

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")
PREVIOUS_ENDING_WORDS = 200

# fraction of the book closing Act I / Act II
ACT1_SHARE = 0.25
ACT2_SHARE = 0.75


class ActBoundaries(NamedTuple):
    act1_end: int
    act2_start: int
    act2_end: int
    act3_start: int

    def as_context(self) -> Dict[str, str]:
        return {
            "act1End": str(self.act1_end),
            "act2Start": str(self.act2_start),
            "act2End": str(self.act2_end),
            "act3Start": str(self.act3_start),
        }


def _round_half_up(x: float) -> int:
    return math.floor(x + 0.5)


def act_boundaries(num_chapters: int) -> ActBoundaries:
    """
    Split *num_chapters* into three acts (25 % / 50 % / 25 %).

    Every act gets at least one chapter once there are three or more.  With
    one or two chapters Act I keeps chapter 1 and the later acts share the
    last chapter.
    """
    if num_chapters < 1:
        raise ValueError("num_chapters must be >= 1")
    if num_chapters < 3:
        return ActBoundaries(1, num_chapters, num_chapters, num_chapters)

    act1_end = max(1, _round_half_up(num_chapters * ACT1_SHARE))
    act2_end = _round_half_up(num_chapters * ACT2_SHARE)
    act2_end = min(max(act2_end, act1_end + 1), num_chapters - 1)
    return ActBoundaries(act1_end, act1_end + 1, act2_end, act2_end + 1)


def substitute(body: str, values: Mapping[str, str]) -> str:
    """Replace each {identifier} found in *values*; leave the rest as written."""

    def repl(m: re.Match) -> str:
        key = m.group(1)
        return values[key] if key in values else m.group(0)

    return PLACEHOLDER_RE.sub(repl, body)


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _as_chapter_count(value: Any) -> int | None:
    try:
        n = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return n if n >= 1 else None


class TemplateEngine:
    """Renders the eight prompt templates for one settings object."""

    def __init__(
        self,
        settings: Settings | None = None,
        genres: Mapping[str, GenreRequirement] = GENRE_REQUIREMENTS,
    ):
        self.settings = settings
        self.genres = genres

    # ─── template lookup ─────────────────────────────────────────────
    @staticmethod
    def template_name(name: TemplateName | str) -> TemplateName:
        try:
            return TemplateName(name)
        except ValueError:
            raise InvalidTemplate(name) from None

    def template_body(self, name: TemplateName | str) -> str:
        key = self.template_name(name)
        override = self.settings.prompt_for(key) if self.settings else None
        return override if override is not None else DEFAULT_PROMPTS[key]

    def placeholders(self, name: TemplateName | str) -> List[str]:
        seen: Dict[str, None] = {}
        for m in PLACEHOLDER_RE.finditer(self.template_body(name)):
            seen.setdefault(m.group(1), None)
        return list(seen)

    # ─── derived values ──────────────────────────────────────────────
    def genre_placeholders(self, genre: str | None) -> Dict[str, str]:
        req = self.genres.get(genre or "")
        if req is None:
            return {"genreRequirements": "", "genreSpecificElements": ""}
        return {
            "genreRequirements": f"{req.requirements}\nPacing: {req.pacing}",
            "genreSpecificElements": (
                f"Genre Requirements: {req.requirements}\n"
                f"Pacing Guidelines: {req.pacing}"
            ),
        }

    def resolve_context(self, context: Mapping[str, Any]) -> Dict[str, str]:
        resolved: Dict[str, str] = {}
        n = _as_chapter_count(context.get("numChapters"))
        if n is not None:
            resolved.update(act_boundaries(n).as_context())
        resolved.update(self.genre_placeholders(_stringify(context.get("genre"))))
        # caller-supplied values win over derived ones
        resolved.update({k: _stringify(v) for k, v in context.items()})
        return resolved

    # ─── rendering ───────────────────────────────────────────────────
    def render(self, name: TemplateName | str, context: Mapping[str, Any]) -> str:
        body = self.template_body(name)
        values = self.resolve_context(context)
        text = substitute(body, values)
        missing = [p for p in PLACEHOLDER_RE.findall(body) if p not in values]
        if missing:
            logger.debug("%s: unresolved placeholders %s", self.template_name(name).value, sorted(set(missing)))
        return text

    def system_prompt(self, name: TemplateName | str, book: Book) -> str:
        key = self.template_name(name)
        return substitute(SYSTEM_PROMPTS[key], self.resolve_context(_book_context(book)))

    def context_for(
        self,
        name: TemplateName | str,
        book: Book,
        *,
        chapter_num: int | None = None,
        content_type: str = "",
        content: str = "",
        feedback: str = "",
        manual_feedback: str = "",
        chapter_outline: str | None = None,
    ) -> Dict[str, Any]:
        """Assemble the context each template expects from the book state."""
        key = self.template_name(name)
        ctx = _book_context(book)

        if key is TemplateName.RANDOM_IDEA:
            ctx["genre"] = book.genre.replace("-", " ")
            ctx["targetAudience"] = book.target_audience.replace("-", " ")
        elif key is TemplateName.CHAPTERS:
            ctx["outline"] = book.outline
        elif key is TemplateName.BOOK_TITLE:
            ctx["outline"] = book.outline
            ctx["chapterOutline"] = book.chapter_outline if chapter_outline is None else chapter_outline
        elif key is TemplateName.WRITING:
            if chapter_num is None:
                raise ValueError("the writing template needs chapter_num")
            ctx["chapterNum"] = chapter_num
            ctx["contextInfo"] = _context_info(book)
            ctx["chapterOutline"] = extract_chapter_outline(book.chapter_outline, chapter_num)
            ctx["previousChapterEnding"] = _previous_ending(book, chapter_num)
        elif key is TemplateName.ANALYSIS:
            ctx["contentType"] = content_type
            ctx["content"] = content
        elif key is TemplateName.IMPROVEMENT:
            ctx["contentType"] = content_type
            ctx["originalContent"] = content
            ctx["feedbackContent"] = feedback
        elif key is TemplateName.MANUAL_IMPROVEMENT:
            ctx["contentType"] = content_type
            ctx["originalContent"] = content
            ctx["manualFeedback"] = manual_feedback
        return ctx


def render(
    name: TemplateName | str,
    context: Mapping[str, Any],
    settings: Settings | None = None,
) -> str:
    return TemplateEngine(settings).render(name, context)


# ─── helpers ─────────────────────────────────────────────────────────────
def _book_context(book: Book) -> Dict[str, Any]:
    return {
        "genre": book.genre,
        "targetAudience": book.target_audience,
        "premise": book.premise,
        "styleDirection": book.style_direction,
        "numChapters": book.num_chapters,
        "targetWordCount": book.target_word_count,
    }


def _context_info(book: Book) -> str:
    return (
        "BOOK SETUP:\n"
        f"- Genre: {book.genre}\n"
        f"- Target Audience: {book.target_audience}\n"
        f"- Premise: {book.premise}\n"
        f"- Style Direction: {book.style_direction}\n\n"
        "COMPLETE STORY STRUCTURE:\n"
        f"{book.outline}\n\n"
        "DETAILED CHAPTER PLAN:\n"
        f"{book.chapter_outline}"
    )


def _previous_ending(book: Book, chapter_num: int) -> str:
    if chapter_num <= 1:
        return ""
    words = book.chapter_text(chapter_num - 1).split()
    return " ".join(words[-PREVIOUS_ENDING_WORDS:])
