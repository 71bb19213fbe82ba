"""ChatVoice plugin: reads incoming chat messages aloud.

A chat client hosts the plugin. The host forwards incoming messages,
``/tts`` command lines and conversation-closed notifications, and shows
the status lines the plugin writes back.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

import yaml

from chatvoice.activation import ActivationState, ConversationId
from chatvoice.commands import CommandRouter, CommandStatus, TTSCommands
from chatvoice.errors import SinkSpawnError
from chatvoice.keywords import KeywordSet
from chatvoice.prefs import Preferences
from chatvoice.processor import MessageProcessor, ProcessResult
from chatvoice.replacements import ReplacementTable
from chatvoice.settings import Profile, Settings
from chatvoice.sink import ShellSink

logger = logging.getLogger(__name__)

PLUGIN_NAME = "ChatVoice"


class Host(ABC):
    """What the plugin needs from the chat client."""

    @abstractmethod
    def write_status(self, conversation_id: ConversationId, message: str) -> None:
        """Show a system line in the conversation's view."""


class SpeechPlugin:
    """Wires settings, activation state, commands and the speech shell together."""

    name = PLUGIN_NAME

    def __init__(self, host: Host, prefs: Optional[Preferences] = None, sink: Optional[ShellSink] = None):
        self.host = host
        self.prefs = prefs if prefs is not None else Preferences.load()
        self.settings = Settings.load(self.prefs)
        self.state = ActivationState(
            global_active=self.settings.active,
            keywords_enabled=self.settings.current.keywords_active,
        )
        self.sink = sink if sink is not None else ShellSink(self.settings.shell)
        self.router = CommandRouter(report=self.log)
        self.commands = TTSCommands(self)
        self._command_ids: list[int] = []
        self.loaded = False
        self._bind_profile()

    @property
    def profile(self) -> Profile:
        return self.settings.current

    def _bind_profile(self) -> None:
        """Point keywords, replacements and the processor at the current profile."""
        profile = self.settings.current
        self.keywords = KeywordSet(profile.keywords)
        self.replacements = ReplacementTable(profile.replacements)
        self.state.set_keywords_enabled(profile.keywords_active)
        self.processor = MessageProcessor(self.state, self.keywords, self.replacements, self.sink, profile)

    # -- lifecycle ----------------------------------------------------------

    def load(self) -> bool:
        try:
            self.sink.start()
        except SinkSpawnError as e:
            # Stay loaded; every dispatch will report the missing shell
            logger.error("%s", e)
        self._command_ids = self.commands.register(self.router)
        self.loaded = True
        logger.info("%s loaded", self.name)
        return True

    def unload(self) -> bool:
        for command_id in self._command_ids:
            self.router.unregister(command_id)
        self._command_ids = []
        self.sink.stop(discard=False)
        self.loaded = False
        logger.info("%s unloaded", self.name)
        return True

    # -- host events --------------------------------------------------------

    def on_message(self, conversation_id: ConversationId, message: str) -> bool:
        """Handle an incoming IM or chat message.

        Always returns False so the host keeps delivering the message.
        """
        result = self.processor.process(conversation_id, message)
        self.report_result(conversation_id, result)
        return False

    def on_command(self, conversation_id: ConversationId, line: str) -> CommandStatus:
        return self.router.dispatch(conversation_id, line)

    def on_conversation_closed(self, conversation_id: ConversationId) -> None:
        self.state.forget(conversation_id)

    # -- helpers used by the commands -------------------------------------

    def log(self, conversation_id: ConversationId, message: str) -> None:
        self.host.write_status(conversation_id, message)

    def report_result(self, conversation_id: ConversationId, result: ProcessResult) -> None:
        if result.error is not None:
            self.log(conversation_id, f"{self.name} - could not speak message: {result.error}")

    def save(self) -> None:
        """Persist settings, including the flags held by the activation state."""
        self.settings.active = self.state.global_active
        self.settings.current.keywords_active = self.state.keywords_enabled
        self.settings.store(self.prefs)
        try:
            self.prefs.save()
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Failed to save preferences: %s", e)

    def set_shell(self, shell: str) -> None:
        self.settings.shell = shell
        self.save()
        try:
            self.sink.restart(shell)
        except SinkSpawnError as e:
            logger.error("%s", e)

    def select_profile(self, name: str) -> None:
        self.save()
        self.settings.select_profile(name)
        self._bind_profile()
        self.save()

    def stop_speech(self) -> None:
        """Kill whatever is being spoken and start a fresh shell."""
        try:
            self.sink.restart()
        except SinkSpawnError as e:
            logger.error("%s", e)
