"""
Parsers for the structured replies some templates ask for.

The randomIdea template asks for PREMISE / STYLE / CHAPTERS lines and the
bookTitle template for TITLE / BLURB.  Models decorate those labels with
markdown often enough that the label match is lenient.
"""

from __future__ import annotations

import re
from typing import List, NamedTuple, Tuple

DEFAULT_CHAPTERS = 20
DEFAULT_STYLE = "Engaging and well-paced narrative style appropriate for the target audience"

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$", re.S)
_LABEL_RE = re.compile(r"^[*#\s]*(PREMISE|STYLE|CHAPTERS|TITLE|BLURB)[*\s]*:[*\s]*(.*?)[*\s]*$")
_HEADING_RE = re.compile(r"^[\s#*\-\d.]*chapter\s+(\d+)\b", re.I)
_SENTENCE_RE = re.compile(r"[.!?]+")


class IdeaSuggestion(NamedTuple):
    premise: str
    style: str
    chapters: int


def clean_reply(raw: str) -> str:
    """Strip a markdown code fence wrapped around the whole reply."""
    raw = raw.strip()
    if raw.startswith("```"):
        raw = _FENCE_RE.sub("", raw).strip()
    return raw


def _label(line: str) -> Tuple[str, str] | None:
    m = _LABEL_RE.match(line)
    if not m:
        return None
    return m.group(1), m.group(2).strip()


def parse_random_idea(text: str) -> IdeaSuggestion:
    text = clean_reply(text)
    premise = style = ""
    chapters = DEFAULT_CHAPTERS

    for line in text.splitlines():
        found = _label(line)
        if not found:
            continue
        tag, value = found
        if tag == "PREMISE":
            premise = value
        elif tag == "STYLE":
            style = value
        elif tag == "CHAPTERS":
            digits = re.search(r"\d+", value)
            if digits and int(digits.group(0)) >= 1:
                chapters = int(digits.group(0))

    if not premise or not style:
        paragraphs = [p.strip() for p in text.split("\n\n") if p.strip()]
        if len(paragraphs) >= 2:
            premise = premise or paragraphs[0]
            style = style or paragraphs[1]
        else:
            premise = premise or text
            style = style or DEFAULT_STYLE

    return IdeaSuggestion(premise, style, chapters)


def extract_first_sentence(text: str) -> str:
    first = _SENTENCE_RE.split(text, maxsplit=1)[0].strip()
    return first or text[:50]


def parse_title_blurb(text: str, premise: str = "") -> Tuple[str, str]:
    """Return (title, blurb); falls back to the premise when labels are missing."""
    title = ""
    blurb_lines: List[str] = []
    collecting = False

    for line in clean_reply(text).splitlines():
        found = _label(line)
        if found and found[0] == "TITLE":
            title = found[1].strip("\"'“”")
            collecting = False
        elif found and found[0] == "BLURB":
            blurb_lines = [found[1]] if found[1] else []
            collecting = True
        elif collecting and line.strip():
            blurb_lines.append(line.strip())

    blurb = " ".join(blurb_lines).strip()
    return title or extract_first_sentence(premise), blurb or premise


def title_blurb_header(title: str, blurb: str) -> str:
    return f'BOOK TITLE: "{title}"\n\nBOOK BLURB:\n{blurb}\n\n{"=" * 50}\n\n'


def extract_chapter_outline(full_outline: str, chapter_num: int) -> str:
    """Return the section of a chapter plan that belongs to *chapter_num*."""
    picked: List[str] = []
    capturing = False

    for line in full_outline.splitlines():
        m = _HEADING_RE.match(line)
        if m and int(m.group(1)) == chapter_num:
            capturing = True
            picked.append(line)
        elif capturing and m:
            break
        elif capturing:
            picked.append(line)

    section = "\n".join(picked).strip()
    return section or f"Chapter {chapter_num} outline not found in full outline."
