# tests/test_prompt_builders.py
import logging

import pytest

from novelfactory.errors import InvalidTemplate
from novelfactory.generators.genres import GENRE_REQUIREMENTS
from novelfactory.generators.prompt_builders import (
    PLACEHOLDER_RE,
    ActBoundaries,
    TemplateEngine,
    act_boundaries,
    render,
    substitute,
)
from novelfactory.generators.templates import DEFAULT_PROMPTS
from novelfactory.models import Book, Settings, TemplateName

PLAN = """Chapter 1: The Gate
Mira finds the gate.

Chapter 2: The Road
She leaves home.

Chapter 10: The End
Everything burns.
"""


@pytest.fixture
def book():
    b = Book(
        genre="fantasy",
        target_audience="young-adult",
        premise="A girl finds a gate to another world.",
        style_direction="Lyrical, close third person",
        num_chapters=20,
        target_word_count=1500,
        outline="ACT I ... ACT III ...",
        chapter_outline=PLAN,
    )
    b.set_chapter(1, " ".join(f"w{i}" for i in range(300)))
    return b


def _full_context(engine, name, book):
    return engine.context_for(
        name, book, chapter_num=2, content_type="outline",
        content="old text", feedback="more conflict", manual_feedback="shorter",
    )


@pytest.mark.parametrize("name", list(TemplateName))
def test_every_template_renders_without_leftover_tokens(name, book):
    engine = TemplateEngine()
    text = engine.render(name, _full_context(engine, name, book))
    declared = set(engine.placeholders(name))
    assert declared
    assert not [t for t in PLACEHOLDER_RE.findall(text) if t in declared]


def test_act_boundaries_twenty_chapters():
    assert act_boundaries(20) == ActBoundaries(5, 6, 15, 16)


def test_act_boundaries_three_chapters_one_each():
    assert act_boundaries(3) == ActBoundaries(1, 2, 2, 3)


@pytest.mark.parametrize("n", range(3, 60))
def test_act_boundaries_every_act_has_a_chapter(n):
    a = act_boundaries(n)
    assert 1 <= a.act1_end < a.act2_start <= a.act2_end < a.act3_start <= n
    assert a.act2_start == a.act1_end + 1
    assert a.act3_start == a.act2_end + 1


@pytest.mark.parametrize("n, expected", [(1, (1, 1, 1, 1)), (2, (1, 2, 2, 2))])
def test_act_boundaries_tiny_books(n, expected):
    assert tuple(act_boundaries(n)) == expected


def test_act_boundaries_rejects_zero():
    with pytest.raises(ValueError):
        act_boundaries(0)


def test_outline_gets_act_numbers():
    text = render("outline", {"numChapters": 20, "genre": "fantasy"})
    assert "Chapters 1-5" in text
    assert "Chapters 6-15" in text


def test_caller_value_beats_derived_value():
    text = render("outline", {"numChapters": 20, "act1End": "7"})
    assert "Chapters 1-7" in text


def test_genre_requirements_known_genre():
    text = render("outline", {"genre": "fantasy", "numChapters": 12})
    req = GENRE_REQUIREMENTS["fantasy"]
    assert req.requirements in text
    assert f"Pacing: {req.pacing}" in text


def test_genre_specific_elements_for_writing(book):
    engine = TemplateEngine()
    text = engine.render("writing", engine.context_for("writing", book, chapter_num=2))
    assert "Pacing Guidelines: Gradual world revelation" in text


def test_unknown_genre_leaves_blank_requirements():
    engine = TemplateEngine()
    assert engine.genre_placeholders("cozy-cooking") == {
        "genreRequirements": "",
        "genreSpecificElements": "",
    }
    text = engine.render("outline", {"genre": "cozy-cooking", "numChapters": 10})
    assert "{genreRequirements}" not in text


def test_unknown_template_name():
    with pytest.raises(InvalidTemplate) as err:
        render("epilogue", {})
    assert err.value.name == "epilogue"
    assert isinstance(err.value, ValueError)


def test_missing_values_stay_literal(caplog):
    with caplog.at_level(logging.DEBUG, logger="novelfactory.generators.prompt_builders"):
        text = render("analysis", {"contentType": "outline"})
    assert "{content}" in text
    assert "{genre}" in text
    assert "unresolved placeholders" in caplog.text


def test_none_renders_empty_string():
    assert substitute("[{premise}]", {"premise": ""}) == "[]"
    text = render("analysis", {"content": None, "contentType": "outline"})
    assert "{content}" not in text


def test_substituted_values_are_not_rescanned():
    text = render("analysis", {"content": "literal {genre} here", "genre": "horror"})
    assert "literal {genre} here" in text


def test_unknown_tokens_in_substitute():
    assert substitute("{a} {b} {not valid} {}", {"a": "1"}) == "1 {b} {not valid} {}"


def test_override_wins():
    settings = Settings(custom_prompts={"writing": "Write chapter {chapterNum} in {genre}."})
    text = render("writing", {"chapterNum": 3, "genre": "horror"}, settings)
    assert text == "Write chapter 3 in horror."


def test_blank_override_uses_builtin():
    settings = Settings(custom_prompts={"outline": "   \n"})
    assert TemplateEngine(settings).template_body("outline") == DEFAULT_PROMPTS[TemplateName.OUTLINE]


def test_override_for_one_template_only():
    settings = Settings(custom_prompts={"writing": "custom"})
    engine = TemplateEngine(settings)
    assert engine.template_body("outline") == DEFAULT_PROMPTS[TemplateName.OUTLINE]


def test_random_idea_uses_spaces(book):
    engine = TemplateEngine()
    ctx = engine.context_for("randomIdea", book)
    assert ctx["targetAudience"] == "young adult"


def test_writing_context(book):
    engine = TemplateEngine()
    ctx = engine.context_for("writing", book, chapter_num=2)
    assert ctx["chapterOutline"].startswith("Chapter 2: The Road")
    assert "Chapter 10" not in ctx["chapterOutline"]
    words = ctx["previousChapterEnding"].split()
    assert len(words) == 200
    assert words[-1] == "w299"
    assert "DETAILED CHAPTER PLAN:" in ctx["contextInfo"]


def test_writing_first_chapter_has_no_previous_ending(book):
    ctx = TemplateEngine().context_for("writing", book, chapter_num=1)
    assert ctx["previousChapterEnding"] == ""


def test_writing_needs_chapter(book):
    with pytest.raises(ValueError):
        TemplateEngine().context_for("writing", book)


def test_system_prompt_for_writing(book):
    msg = TemplateEngine().system_prompt("writing", book)
    assert msg == "You are a master storyteller writing professional fantasy fiction for young-adult readers."


def test_override_resolves_like_builtin():
    tokens = ["genre", "numChapters", "act1End", "act2Start", "act2End", "act3Start", "genreRequirements"]
    ctx = {"genre": "fantasy", "numChapters": 20}
    settings = Settings(custom_prompts={"outline": "|".join("{" + t + "}" for t in tokens)})

    custom = render("outline", ctx, settings).split("|")
    expected = TemplateEngine().resolve_context(ctx)
    assert custom == [expected[t] for t in tokens]
    assert custom[:6] == ["fantasy", "20", "5", "6", "15", "16"]

    builtin = render("outline", ctx)
    assert "- Genre: fantasy" in builtin
    assert "Chapters 1-5:" in builtin
    assert "Chapters 6-15:" in builtin
    assert "Chapters 16-20:" in builtin
    assert expected["genreRequirements"] in builtin
