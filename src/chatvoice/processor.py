"""Gating, cleanup and dispatch of incoming chat messages."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from chatvoice.activation import ActivationState, ConversationId, Gate
from chatvoice.errors import SinkWriteError
from chatvoice.keywords import KeywordSet
from chatvoice.normalize import normalize_text
from chatvoice.replacements import ReplacementTable
from chatvoice.settings import Profile
from chatvoice.sink import ShellSink, SpeechRequest

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """What happened to one message.

    ``spoken`` is the gate decision. A message can pass the gate and still
    fail to reach the speech shell, in which case ``error`` is set.
    """

    spoken: bool
    normalized_text: Optional[str] = None
    error: Optional[SinkWriteError] = None

    @property
    def delivered(self) -> bool:
        return self.spoken and self.error is None


class MessageProcessor:
    """Decides whether a message is spoken and hands it to the sink."""

    def __init__(
        self,
        state: ActivationState,
        keywords: KeywordSet,
        replacements: ReplacementTable,
        sink: ShellSink,
        profile: Profile,
    ):
        self.state = state
        self.keywords = keywords
        self.replacements = replacements
        self.sink = sink
        self.profile = profile

    def passes_gate(self, conversation_id: ConversationId, raw_text: str) -> bool:
        gate = self.state.should_speak(conversation_id)
        if gate is Gate.KEYWORD:
            # Keywords are matched against the raw text, markup included
            word = self.keywords.find_match(raw_text)
            if word is not None:
                logger.debug("Keyword %r found in message for %r", word, conversation_id)
            return word is not None
        return gate is Gate.SPEAK

    def normalize(self, raw_text: str) -> str:
        return normalize_text(raw_text, self.replacements)

    def process(self, conversation_id: ConversationId, raw_text: str) -> ProcessResult:
        """Gate, clean up and speak one incoming message."""
        if not self.passes_gate(conversation_id, raw_text):
            return ProcessResult(spoken=False)
        return self._dispatch(raw_text)

    def say(self, conversation_id: ConversationId, raw_text: str) -> ProcessResult:
        """Speak text regardless of the gate, unless the conversation is silenced."""
        if self.state.is_inactive(conversation_id):
            return ProcessResult(spoken=False)
        return self._dispatch(raw_text)

    def _dispatch(self, raw_text: str) -> ProcessResult:
        text = self.normalize(raw_text)
        request = SpeechRequest(
            command=self.profile.command,
            compose=self.profile.compose,
            language=self.profile.language,
            volume=self.profile.volume,
            text=text,
        )
        try:
            self.sink.speak(request)
        except SinkWriteError as e:
            logger.error("Error while executing %s: %s", self.profile.command, e)
            return ProcessResult(spoken=True, normalized_text=text, error=e)
        return ProcessResult(spoken=True, normalized_text=text)
