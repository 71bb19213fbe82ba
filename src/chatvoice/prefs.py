"""Typed key/value access to the configuration tree.

Keys are ``/``-separated paths into the nested config mapping, e.g.
``active`` or ``profiles/espeak/language``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from chatvoice.config import ConfigDict, load_config, save_config

logger = logging.getLogger(__name__)


def _split(path: str) -> list[str]:
    parts = [part for part in path.split("/") if part]
    if not parts:
        raise KeyError(path)
    return parts


class Preferences:
    """Preference store backed by a YAML config file."""

    def __init__(self, data: Optional[ConfigDict] = None, path: Optional[Path] = None):
        self.path = path
        self.data = data if data is not None else load_config(path)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Preferences":
        return cls(load_config(path), path)

    def save(self) -> None:
        save_config(self.data, self.path)
        logger.debug("Preferences saved to %s", self.path or "default location")

    def has(self, path: str) -> bool:
        try:
            self._get(path)
        except KeyError:
            return False
        return True

    def _get(self, path: str) -> Any:
        node: Any = self.data
        for part in _split(path):
            if not isinstance(node, dict) or part not in node:
                raise KeyError(path)
            node = node[part]
        return node

    def _set(self, path: str, value: Any) -> None:
        *parents, leaf = _split(path)
        node = self.data
        for part in parents:
            child = node.get(part)
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child
        node[leaf] = value

    def get_bool(self, path: str) -> bool:
        return bool(self._get(path))

    def set_bool(self, path: str, value: bool) -> None:
        self._set(path, bool(value))

    def get_string(self, path: str) -> str:
        value = self._get(path)
        return "" if value is None else str(value)

    def set_string(self, path: str, value: str) -> None:
        self._set(path, str(value))

    def get_string_list(self, path: str) -> list[str]:
        value = self._get(path)
        return [str(item) for item in value or []]

    def set_string_list(self, path: str, value: list[str]) -> None:
        self._set(path, [str(item) for item in value])

    def get_list(self, path: str) -> list:
        return list(self._get(path) or [])

    def set_list(self, path: str, value: list) -> None:
        self._set(path, list(value))
