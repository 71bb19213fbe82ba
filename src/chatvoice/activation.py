"""Per-conversation and global speech activation.

Three levels decide whether a conversation is spoken:

1. An explicit per-conversation override (active or inactive).
2. The global default.
3. Keyword mode, which defers the decision to the message text.

A conversation is never in both the active and the inactive set.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Hashable

logger = logging.getLogger(__name__)

ConversationId = Hashable


class Gate(Enum):
    """Outcome of the activation lookup for one conversation."""

    SPEAK = "speak"
    SILENT = "silent"
    KEYWORD = "keyword"  # speak only if the text contains a keyword


class ActivationState:
    """Activation flags for the running plugin."""

    def __init__(self, global_active: bool = True, keywords_enabled: bool = False):
        self.global_active = global_active
        self.keywords_enabled = keywords_enabled
        self._active: set = set()
        self._inactive: set = set()

    def is_active(self, conversation_id: ConversationId) -> bool:
        return conversation_id in self._active

    def is_inactive(self, conversation_id: ConversationId) -> bool:
        return conversation_id in self._inactive

    def has_override(self, conversation_id: ConversationId) -> bool:
        return self.is_active(conversation_id) or self.is_inactive(conversation_id)

    def should_speak(self, conversation_id: ConversationId) -> Gate:
        if conversation_id in self._inactive:
            return Gate.SILENT
        if conversation_id in self._active:
            return Gate.SPEAK
        if self.global_active:
            return Gate.SPEAK
        if self.keywords_enabled:
            return Gate.KEYWORD
        return Gate.SILENT

    def set_conversation_active(self, conversation_id: ConversationId, active: bool) -> None:
        if active:
            self._active.add(conversation_id)
            self._inactive.discard(conversation_id)
        else:
            self._active.discard(conversation_id)

    def set_conversation_inactive(self, conversation_id: ConversationId, inactive: bool) -> None:
        if inactive:
            self._inactive.add(conversation_id)
            self._active.discard(conversation_id)
        else:
            self._inactive.discard(conversation_id)

    def enable_conversation(self, conversation_id: ConversationId) -> None:
        """Turn speech on for a conversation.

        If the global default is already on, an inactive conversation just
        drops its override instead of gaining an explicit active flag.
        """
        if self.is_inactive(conversation_id) and self.global_active:
            self.set_conversation_inactive(conversation_id, False)
        else:
            self.set_conversation_active(conversation_id, True)

    def disable_conversation(self, conversation_id: ConversationId) -> None:
        """Turn speech off for a conversation (mirror of enable_conversation)."""
        if self.is_active(conversation_id) and not self.global_active:
            self.set_conversation_active(conversation_id, False)
        else:
            self.set_conversation_inactive(conversation_id, True)

    def set_global_active(self, active: bool) -> None:
        self.global_active = active

    def set_keywords_enabled(self, enabled: bool) -> None:
        self.keywords_enabled = enabled

    def forget(self, conversation_id: ConversationId) -> None:
        """Drop all overrides for a conversation that has been closed."""
        if self.has_override(conversation_id):
            logger.debug("Forgetting overrides for %r", conversation_id)
        self._active.discard(conversation_id)
        self._inactive.discard(conversation_id)

    def overrides(self) -> tuple[frozenset, frozenset]:
        """Return (active, inactive) snapshots."""
        return frozenset(self._active), frozenset(self._inactive)
