"""
formatter.py — lightweight cleaner for generated prose

    from novelfactory.utils.formatter import format_text, count_words
"""

from __future__ import annotations

import re

__all__ = ["format_text", "count_words", "sanitize_filename"]


# ----------------------------------------------------------------------
def _smart_quotes(t: str) -> str:
    return (
        t.replace("“", '"').replace("”", '"')
         .replace("‘", "'").replace("’", "'")
    )


def _unify_eol(t: str) -> str:
    return t.replace("\r\n", "\n").replace("\r", "\n")


# ----------------------------------------------------------------------
def format_text(txt: str) -> str:
    """
    Return *txt* cleaned of common whitespace / Unicode oddities.

    Rules applied (in order):

    1. Convert CR/LF variants to `\\n`.
    2. Strip trailing spaces / tabs.
    3. Collapse 3+ consecutive newlines -> one blank line.
    4. Replace “smart quotes” with straight quotes.
    5. Ensure exactly one trailing newline at EOF.

    Dashes are kept: chapter prose uses em dashes on purpose.
    """
    txt = _unify_eol(txt)
    txt = re.sub(r"[ \t]+\n", "\n", txt)       # strip EOL whitespace
    txt = re.sub(r"\n{3,}", "\n\n", txt)       # collapse blank paragraphs
    txt = _smart_quotes(txt)
    return txt.rstrip() + "\n"                 # canonical single newline


def count_words(text: str | None) -> int:
    if not text:
        return 0
    return len(text.split())


def sanitize_filename(name: str) -> str:
    cleaned = re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")
    return cleaned[:100] or "untitled"
