"""
workflow.py – generation steps over one book

idea → outline → chapter plan (+ title & blurb) → chapters → feedback loops
Each step renders a template, calls the model and writes the result back
into the Book in place.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator, List, Protocol

from novelfactory.errors import GenerationInProgress, MissingBookData
from novelfactory.generators import parsers
from novelfactory.generators.prompt_builders import TemplateEngine
from novelfactory.llm.openai_wrapper import call_llm
from novelfactory.models import Book, ChapterStatus, Settings, Step, TemplateName

logger = logging.getLogger(__name__)

CONTENT_TYPES = ("outline", "chapters", "chapter")


class LLMCall(Protocol):
    def __call__(self, prompt: str, *, settings: Settings, system_prompt: str = "", model: str | None = None) -> str: ...


class Studio:
    def __init__(
        self,
        book: Book,
        settings: Settings,
        llm: LLMCall = call_llm,
        engine: TemplateEngine | None = None,
    ):
        self.book = book
        self.settings = settings
        self.llm = llm
        self.engine = engine or TemplateEngine(settings)
        self.busy = False

    @contextmanager
    def _generating(self, what: str) -> Iterator[None]:
        if self.busy:
            raise GenerationInProgress("Please wait until the current generation is finished...")
        self.busy = True
        logger.info("%s …", what)
        try:
            yield
        finally:
            self.busy = False

    def _ask(self, name: TemplateName, step: str, **extra) -> str:
        prompt = self.engine.render(name, self.engine.context_for(name, self.book, **extra))
        return self.llm(
            prompt,
            settings=self.settings,
            system_prompt=self.engine.system_prompt(name, self.book),
            model=self.settings.model_for(step),
        )

    # ─── setup ───────────────────────────────────────────────────────
    def random_idea(self) -> parsers.IdeaSuggestion:
        if not self.book.genre or not self.book.target_audience:
            raise MissingBookData("Please select genre and target audience first!")
        with self._generating("Crafting a story idea"):
            idea = parsers.parse_random_idea(self._ask(TemplateName.RANDOM_IDEA, "randomIdea"))
        self.book.premise = idea.premise
        self.book.style_direction = idea.style
        self.book.num_chapters = idea.chapters
        return idea

    # ─── outline & plan ──────────────────────────────────────────────
    def generate_outline(self) -> str:
        if not self.book.premise:
            raise MissingBookData("Please fill in the premise before generating the story structure.")
        with self._generating("Generating story structure"):
            self.book.outline = self._ask(TemplateName.OUTLINE, "outline")
        self.book.current_step = Step.OUTLINE
        return self.book.outline

    def generate_chapter_outline(self) -> str:
        if not self.book.outline:
            raise MissingBookData("Generate the story structure before the chapter plan.")
        with self._generating("Creating chapter plan"):
            plan = self._ask(TemplateName.CHAPTERS, "chapters")
            reply = self._ask(TemplateName.BOOK_TITLE, "bookTitle", chapter_outline=plan)
        title, blurb = parsers.parse_title_blurb(reply, self.book.premise)
        self.book.title, self.book.blurb = title, blurb
        self.book.chapter_outline = parsers.title_blurb_header(title, blurb) + plan
        self.book.current_step = Step.CHAPTERS
        return self.book.chapter_outline

    # ─── chapters ────────────────────────────────────────────────────
    def write_chapter(self, number: int) -> str:
        if not 1 <= number <= self.book.num_chapters:
            raise ValueError(f"chapter must be between 1 and {self.book.num_chapters}")
        if not self.book.chapter_outline:
            raise MissingBookData("Create the chapter plan before writing chapters.")
        with self._generating(f"Writing chapter {number}"):
            text = self._ask(TemplateName.WRITING, "writing", chapter_num=number)
        self.book.set_chapter(number, text, ChapterStatus.DRAFT)
        self.book.current_step = Step.WRITING
        return text

    def write_selected(self, numbers: Iterable[int]) -> List[int]:
        done = []
        for n in sorted(set(numbers)):
            self.write_chapter(n)
            done.append(n)
        return done

    def write_all(self) -> List[int]:
        return self.write_selected(range(1, self.book.num_chapters + 1))

    # ─── feedback ────────────────────────────────────────────────────
    def _content(self, content_type: str, chapter: int | None) -> str:
        if content_type == "outline":
            return self.book.outline
        if content_type == "chapters":
            return self.book.chapter_outline
        if chapter is None:
            raise ValueError("chapter feedback needs a chapter number")
        return self.book.chapter_text(chapter)

    def _store(self, content_type: str, chapter: int | None, text: str) -> None:
        if content_type == "outline":
            self.book.outline = text
        elif content_type == "chapters":
            self.book.chapter_outline = text
        else:
            self.book.set_chapter(chapter, text, ChapterStatus.IMPROVED)

    def improve(
        self,
        content_type: str,
        loops: int = 1,
        manual_feedback: str | None = None,
        chapter: int | None = None,
    ) -> str:
        """
        Run *loops* feedback passes over the outline, the chapter plan or one
        chapter.  Without *manual_feedback* each pass is analysis followed by
        improvement; with it each pass applies the user's instructions.
        """
        if content_type not in CONTENT_TYPES:
            raise ValueError(f"content_type must be one of {CONTENT_TYPES}")
        content = self._content(content_type, chapter)
        if not content.strip():
            raise MissingBookData(f"No {content_type} content to analyze. Please generate content first.")
        if manual_feedback is not None and not manual_feedback.strip():
            raise MissingBookData("Please provide manual feedback instructions before running the feedback loop.")

        mode = "manual" if manual_feedback else "ai"
        with self._generating(f"Running {loops} {mode} feedback loop(s) on {content_type}"):
            for i in range(loops):
                logger.info("Feedback loop %d of %d", i + 1, loops)
                if manual_feedback:
                    content = self._ask(
                        TemplateName.MANUAL_IMPROVEMENT, "feedback",
                        content_type=content_type, content=content, manual_feedback=manual_feedback,
                    )
                else:
                    analysis = self._ask(
                        TemplateName.ANALYSIS, "feedback", content_type=content_type, content=content,
                    )
                    content = self._ask(
                        TemplateName.IMPROVEMENT, "feedback",
                        content_type=content_type, content=content, feedback=analysis,
                    )
                self._store(content_type, chapter, content)
        return content

    # ─── everything ──────────────────────────────────────────────────
    def one_click(
        self,
        outline_loops: int = 0,
        chapters_loops: int = 0,
        writing_loops: int = 0,
        cancelled: Callable[[], bool] = lambda: False,
        progress: Callable[[str], None] | None = None,
    ) -> bool:
        """Run the whole pipeline; returns False when *cancelled* stopped it."""
        if not (self.book.genre and self.book.target_audience and self.book.premise):
            raise MissingBookData("Please fill in all required fields before starting one-click generation.")

        def note(msg: str) -> None:
            logger.info(msg)
            if progress:
                progress(msg)

        note("Generating story structure...")
        self.generate_outline()
        if outline_loops > 0 and not cancelled():
            note(f"Improving story structure ({outline_loops} feedback loops)...")
            self.improve("outline", outline_loops)
        if cancelled():
            return False

        note("Creating detailed chapter plan...")
        self.generate_chapter_outline()
        if chapters_loops > 0 and not cancelled():
            note(f"Improving chapter plan ({chapters_loops} feedback loops)...")
            self.improve("chapters", chapters_loops)

        for n in range(1, self.book.num_chapters + 1):
            if cancelled():
                return False
            note(f"Writing Chapter {n} of {self.book.num_chapters}...")
            self.write_chapter(n)
            if writing_loops > 0:
                note(f"Improving Chapter {n} with feedback...")
                self.improve("chapter", writing_loops, chapter=n)

        if cancelled():
            return False
        self.book.current_step = Step.EXPORT
        note("Finalizing book...")
        return True
