"""Ordered text substitution rules applied before speaking."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional

from chatvoice.errors import InvalidPattern


@dataclass
class Replacement:
    """A single pattern => replacement rule."""

    pattern: str
    replacement: str

    @classmethod
    def from_dict(cls, data: dict) -> "Replacement":
        """Build a rule from a config mapping.

        Raises InvalidPattern if the pattern is missing or empty.
        """
        if not isinstance(data, dict):
            raise InvalidPattern(f"replacement must be a mapping, not {data!r}")
        pattern = data.get("pattern")
        if pattern is None or not str(pattern):
            raise InvalidPattern("replacement pattern must not be empty")
        replacement = data.get("replacement")
        return cls(pattern=str(pattern), replacement="" if replacement is None else str(replacement))

    def to_dict(self) -> dict:
        return {"pattern": self.pattern, "replacement": self.replacement}


class ReplacementTable:
    """Sequential substitution table.

    Rules run in table order and each rule sees the output of the one
    before it, so ``[("a", "b"), ("b", "c")]`` turns ``"a"`` into ``"c"``.

    The table works in place on the list it is given, so a list owned by
    a settings record stays in sync with edits made here.
    """

    def __init__(self, entries: Optional[List[Replacement]] = None):
        self._entries = entries if entries is not None else []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Replacement]:
        return iter(self._entries)

    def __contains__(self, pattern: object) -> bool:
        return self._find(pattern) is not None

    def _find(self, pattern: object) -> Optional[int]:
        for index, entry in enumerate(self._entries):
            if entry.pattern == pattern:
                return index
        return None

    def add(self, pattern: str, replacement: str) -> None:
        """Add a rule, replacing any existing rule for the same pattern.

        An updated rule is moved to the front of the table.
        """
        if not pattern:
            raise InvalidPattern("replacement pattern must not be empty")
        self.remove(pattern)
        self._entries.insert(0, Replacement(pattern, replacement))

    def remove(self, pattern: str) -> bool:
        """Delete the rule for pattern. Returns True if one was deleted."""
        index = self._find(pattern)
        if index is None:
            return False
        del self._entries[index]
        return True

    def get(self, pattern: str) -> Optional[str]:
        index = self._find(pattern)
        return None if index is None else self._entries[index].replacement

    def list(self) -> list[tuple[str, str]]:
        """Return (pattern, replacement) pairs in table order."""
        return [(entry.pattern, entry.replacement) for entry in self._entries]

    def apply(self, text: str) -> str:
        for entry in self._entries:
            text = text.replace(entry.pattern, entry.replacement)
        return text
