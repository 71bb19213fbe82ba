"""Text cleanup before a message is spoken.

Incoming chat messages carry HTML-ish markup. The spoken text must be
plain and must not contain apostrophes or newlines, since it ends up on
a shell command line.
"""

from __future__ import annotations

import html
import re
from typing import Optional

from chatvoice.replacements import ReplacementTable

UNSAFE_CHARS = ("'", "\n")

_HIDDEN_BLOCK_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_LINE_BREAK_RE = re.compile(r"<br\s*/?>|</(p|div|li|tr|h[1-6])\s*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]*>")


def strip_markup(text: str) -> str:
    """Remove HTML tags and decode entities.

    Line-breaking tags become newlines. strip_unsafe drops those newlines
    later, so "one<br>two" is spoken as "onetwo".
    """
    text = _HIDDEN_BLOCK_RE.sub("", text)
    text = _LINE_BREAK_RE.sub("\n", text)
    text = _TAG_RE.sub("", text)
    return html.unescape(text)


def strip_unsafe(text: str) -> str:
    """Remove apostrophes and newlines entirely."""
    for char in UNSAFE_CHARS:
        text = text.replace(char, "")
    return text


def normalize_text(text: str, replacements: Optional[ReplacementTable] = None) -> str:
    """Strip markup and unsafe characters, then run the replacement table."""
    text = strip_unsafe(strip_markup(text))
    if replacements is not None:
        text = replacements.apply(text)
    return text
