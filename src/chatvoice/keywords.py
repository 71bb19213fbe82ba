"""Trigger words for keyword-activated speech."""

from __future__ import annotations

from typing import Iterator, List, Optional


class KeywordSet:
    """Unique trigger substrings, matched case-sensitively.

    Like ReplacementTable, edits are made in place on the given list.
    New words go to the front, so matching scans newest words first.
    """

    def __init__(self, words: Optional[List[str]] = None):
        self._words = words if words is not None else []

    def __len__(self) -> int:
        return len(self._words)

    def __iter__(self) -> Iterator[str]:
        return iter(self._words)

    def __contains__(self, word: object) -> bool:
        return word in self._words

    def add(self, word: str) -> bool:
        """Insert word if absent. Returns True if it was added."""
        if not word or word in self._words:
            return False
        self._words.insert(0, word)
        return True

    def remove(self, word: str) -> bool:
        """Delete word if present. Returns True if it was removed."""
        if word not in self._words:
            return False
        self._words.remove(word)
        return True

    def find_match(self, text: str) -> Optional[str]:
        """Return the first keyword found in text, or None."""
        for word in self._words:
            if word in text:
                return word
        return None

    def contains_match(self, text: str) -> bool:
        return self.find_match(text) is not None

    def list(self) -> list[str]:
        return list(self._words)
