#!/usr/bin/env python3
"""
manuscript.py – stitch the written chapters into one txt / html / md file
"""

from __future__ import annotations

import html
import logging
import pathlib
from typing import NamedTuple

from novelfactory import config
from novelfactory.errors import MissingBookData
from novelfactory.models import Book
from novelfactory.utils.formatter import count_words, format_text, sanitize_filename

logger = logging.getLogger(__name__)

FORMATS = ("txt", "html", "md")

_HTML_STYLE = """\
        body { font-family: Georgia, serif; max-width: 800px; margin: 0 auto; padding: 20px; line-height: 1.8; }
        h1 { color: #333; border-bottom: 3px solid #007AFF; padding-bottom: 10px; }
        h2 { color: #666; margin-top: 40px; page-break-before: always; }
        .book-info { background: #f9f9f9; padding: 25px; border-radius: 10px; margin-bottom: 40px; }
        .book-blurb { background: #fff; padding: 20px; border-left: 4px solid #007AFF; margin: 20px 0; font-style: italic; }
        .chapter { margin-bottom: 50px; }
        p { margin-bottom: 1em; }
        .footer { text-align: center; margin-top: 50px; font-size: 0.9em; color: #666; }"""


class BookStats(NamedTuple):
    total_words: int
    chapters: int
    average_words: int
    reading_minutes: int


# ----------------------------------------------------------------------
def book_stats(book: Book) -> BookStats:
    done = book.completed_chapters()
    total = sum(count_words(c.content) for c in done)
    avg = round(total / len(done)) if done else 0
    return BookStats(total, len(done), avg, round(total / config.READING_SPEED_WPM))


def display_title(book: Book) -> str:
    if book.title:
        return book.title
    premise = book.premise
    return premise[:50] + ("..." if len(premise) > 50 else "")


# ----------------------------------------------------------------------
def render_txt(book: Book) -> str:
    parts = [
        f"{display_title(book)}\n",
        f"Genre: {book.genre}\n",
        f"Target Audience: {book.target_audience}\n\n",
    ]
    if book.blurb:
        parts.append(f"BOOK DESCRIPTION:\n{book.blurb}\n\n")
    parts.append("=" * 50 + "\n\n")
    for ch in book.completed_chapters():
        parts.append(f"CHAPTER {ch.number}\n\n{ch.content}\n\n")
        parts.append("=" * 30 + "\n\n")
    return format_text("".join(parts))


def render_markdown(book: Book) -> str:
    parts = [
        f"# {display_title(book)}\n\n",
        f"**Genre:** {book.genre}  \n",
        f"**Target Audience:** {book.target_audience}  \n",
        f"**Style:** {book.style_direction}\n\n",
    ]
    if book.blurb:
        parts.append(f"## Book Description\n\n{book.blurb}\n\n")
    parts.append("---\n\n")
    for ch in book.completed_chapters():
        parts.append(f"## Chapter {ch.number}\n\n{ch.content}\n\n---\n\n")
    parts.append(f"\n*Generated by [{config.APP_TITLE}]({config.APP_URL})*\n")
    return format_text("".join(parts))


def _html_paragraphs(text: str) -> str:
    escaped = html.escape(text.strip())
    return "<p>" + escaped.replace("\n\n", "</p><p>").replace("\n", "<br>") + "</p>"


def render_html(book: Book) -> str:
    e = html.escape
    title = e(display_title(book))
    blurb = f'\n        <div class="book-blurb">{e(book.blurb)}</div>' if book.blurb else ""
    chapters = "".join(
        f'    <div class="chapter">\n'
        f"        <h2>Chapter {ch.number}</h2>\n"
        f"        {_html_paragraphs(ch.content)}\n"
        f"    </div>\n"
        for ch in book.completed_chapters()
    )
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n<head>\n'
        '    <meta charset="UTF-8">\n'
        '    <meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"    <title>{title}</title>\n"
        f'    <meta name="generator" content="{config.APP_TITLE} - {config.APP_URL}">\n'
        f"    <style>\n{_HTML_STYLE}\n    </style>\n"
        "</head>\n<body>\n"
        '    <div class="book-info">\n'
        f"        <h1>{title}</h1>\n"
        f"        <p><strong>Genre:</strong> {e(book.genre)}</p>\n"
        f"        <p><strong>Target Audience:</strong> {e(book.target_audience)}</p>\n"
        f"        <p><strong>Style:</strong> {e(book.style_direction)}</p>{blurb}\n"
        "    </div>\n"
        f"{chapters}"
        '    <div class="footer">\n'
        f'        <p>Generated by <a href="{config.APP_URL}">{config.APP_TITLE}</a></p>\n'
        "    </div>\n"
        "</body>\n</html>\n"
    )


_RENDERERS = {"txt": render_txt, "html": render_html, "md": render_markdown}


# ----------------------------------------------------------------------
def render_book(book: Book, fmt: str) -> str:
    if fmt not in _RENDERERS:
        raise ValueError(f"format must be one of {FORMATS}")
    if not book.completed_chapters():
        raise MissingBookData("No chapters to export. Please complete the writing process first.")
    return _RENDERERS[fmt](book)


def export_book(book: Book, fmt: str, out_dir: pathlib.Path) -> pathlib.Path:
    text = render_book(book, fmt)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"{sanitize_filename(display_title(book))}.{fmt}"
    path.write_text(text, encoding="utf-8")
    logger.info("Manuscript created → %s  (%s words)", path, f"{book_stats(book).total_words:,}")
    return path
