# tests/test_parsers.py
from novelfactory.generators.parsers import (
    DEFAULT_CHAPTERS,
    DEFAULT_STYLE,
    clean_reply,
    extract_chapter_outline,
    extract_first_sentence,
    parse_random_idea,
    parse_title_blurb,
    title_blurb_header,
)


def test_random_idea_labels():
    reply = (
        "**PREMISE:** A lighthouse keeper hears the sea speak.\n"
        "**STYLE:** Quiet, eerie, first person\n"
        "**CHAPTERS:** 24 chapters\n"
    )
    idea = parse_random_idea(reply)
    assert idea.premise == "A lighthouse keeper hears the sea speak."
    assert idea.style == "Quiet, eerie, first person"
    assert idea.chapters == 24


def test_random_idea_in_code_fence():
    reply = "```\nPREMISE: Twins swap lives.\nSTYLE: Brisk\nCHAPTERS: 18\n```"
    assert parse_random_idea(reply) == ("Twins swap lives.", "Brisk", 18)


def test_random_idea_without_labels_uses_paragraphs():
    idea = parse_random_idea("A city floats.\n\nWry and fast.")
    assert idea == ("A city floats.", "Wry and fast.", DEFAULT_CHAPTERS)


def test_random_idea_single_paragraph():
    idea = parse_random_idea("Just one idea here.")
    assert idea.premise == "Just one idea here."
    assert idea.style == DEFAULT_STYLE


def test_random_idea_bad_chapter_count():
    idea = parse_random_idea("PREMISE: p\nSTYLE: s\nCHAPTERS: many")
    assert idea.chapters == DEFAULT_CHAPTERS


def test_title_and_blurb():
    reply = 'TITLE: "The Salt Crown"\nBLURB: A queen without a kingdom.\nShe wants it back.\n'
    assert parse_title_blurb(reply) == ("The Salt Crown", "A queen without a kingdom. She wants it back.")


def test_title_blurb_fallback_to_premise():
    title, blurb = parse_title_blurb("no labels at all", "A queen loses her crown. Then more.")
    assert title == "A queen loses her crown"
    assert blurb == "A queen loses her crown. Then more."


def test_first_sentence():
    assert extract_first_sentence("Hello there! More.") == "Hello there"
    assert extract_first_sentence("") == ""


def test_header():
    header = title_blurb_header("T", "B")
    assert header.startswith('BOOK TITLE: "T"\n\nBOOK BLURB:\nB\n\n')
    assert header.endswith("=" * 50 + "\n\n")


def test_clean_reply():
    assert clean_reply("```markdown\nbody\n```") == "body"
    assert clean_reply("  plain ") == "plain"


def test_chapter_outline_sections():
    plan = (
        "## Chapter 1: Start\nopening\n\n"
        "**Chapter 10 - Late**\nten\n\n"
        "## Chapter 11: Later\neleven\n"
    )
    assert extract_chapter_outline(plan, 1) == "## Chapter 1: Start\nopening"
    assert extract_chapter_outline(plan, 10) == "**Chapter 10 - Late**\nten"
    assert extract_chapter_outline(plan, 11) == "## Chapter 11: Later\neleven"


def test_chapter_outline_missing():
    assert extract_chapter_outline("nothing", 4) == "Chapter 4 outline not found in full outline."
