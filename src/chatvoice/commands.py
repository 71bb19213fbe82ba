"""Chat commands for ChatVoice.

All commands live under ``/tts``::

    /tts [on | off | status | say <text> | test <text> | stop]
    /tts [shell | command | compose] [<value>]
    /tts [profile | lang | volume] <value>
    /tts buddy [on | off]
    /tts keyword [on | off | list | add <word> | remove <word>]
    /tts replace [<pattern> [<replacement>]]
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

from chatvoice.activation import ConversationId
from chatvoice.errors import CommandParseError
from chatvoice.sink import validate_compose

if TYPE_CHECKING:
    from chatvoice.plugin import SpeechPlugin

logger = logging.getLogger(__name__)

CMD_TTS = "tts"

CMD_ENABLE = "on"
CMD_DISABLE = "off"
CMD_SHELL = "shell"
CMD_BIN = "command"
CMD_COMPOSE = "compose"
CMD_LANGUAGE = "lang"
CMD_VOLUME = "volume"
CMD_PROFILE = "profile"
CMD_STATUS = "status"
CMD_TEST = "test"
CMD_SAY = "say"
CMD_STOP = "stop"

CMD_CONV = "buddy"
CMD_KEYWORD = "keyword"
CMD_KEYWORD_LIST = "list"
CMD_KEYWORD_ADD = "add"
CMD_KEYWORD_REMOVE = "remove"
CMD_REPLACE = "replace"

Args = list[Optional[str]]
Handler = Callable[[ConversationId, Args], "CommandStatus"]


class CommandStatus(Enum):
    OK = "ok"
    FAILED = "failed"  # bad arguments
    CONTINUE = "continue"  # not this handler's command


def split_args(text: str, count: int) -> Args:
    """Split text into count arguments, the last one taking the rest.

    Missing arguments are None, so handlers can check arity by position.
    """
    parts = text.split(None, count - 1) if text.strip() else []
    return parts + [None] * (count - len(parts))


@dataclass
class Registration:
    id: int
    name: str
    arity: int
    handler: Handler
    help: str = ""


class CommandRouter:
    """Dispatches command lines to registered handlers.

    Handlers sharing a name are tried in registration order until one
    returns something other than CONTINUE.
    """

    def __init__(self, report: Optional[Callable[[ConversationId, str], None]] = None):
        self._registrations: list[Registration] = []
        self._ids = itertools.count(1)
        self._report = report

    def register(self, name: str, arity: int, handler: Handler, help: str = "") -> int:
        registration = Registration(next(self._ids), name, arity, handler, help)
        self._registrations.append(registration)
        return registration.id

    def unregister(self, command_id: int) -> None:
        self._registrations = [r for r in self._registrations if r.id != command_id]

    def help(self, name: str) -> list[str]:
        return [r.help for r in self._registrations if r.name == name and r.help]

    def dispatch(self, conversation_id: ConversationId, line: str) -> CommandStatus:
        """Run a command line such as ``tts buddy on`` (leading slash optional)."""
        name, _, rest = line.strip().lstrip("/").partition(" ")
        for registration in self._registrations:
            if registration.name != name:
                continue
            args = split_args(rest, registration.arity)
            try:
                status = registration.handler(conversation_id, args)
            except CommandParseError as e:
                logger.debug("Command %r failed: %s", line, e)
                if self._report is not None:
                    self._report(conversation_id, str(e))
                return CommandStatus.FAILED
            if status is CommandStatus.FAILED and self._report is not None:
                self._report(conversation_id, "\n".join(["Usage:", *self.help(name)]))
            if status is not CommandStatus.CONTINUE:
                return status
        return CommandStatus.CONTINUE


class TTSCommands:
    """The ``/tts`` command handlers and their status lines."""

    HELP_GLOBAL = (
        "/tts [on | off | compose <command line composition> | shell <path> | "
        "command <path> | profile <name> | lang <language> | volume <volume> | "
        "say <text> | test <text> | stop | status]"
    )
    HELP_CONV = "/tts buddy [on | off]"
    HELP_KEYWORD = "/tts keyword [on | off | list | add <keyword> | remove <keyword>]"
    HELP_REPLACE = "/tts replace [<word> [<replacement>]]"

    def __init__(self, plugin: "SpeechPlugin"):
        self.plugin = plugin

    def register(self, router: CommandRouter) -> list[int]:
        # Subcommand handlers go first, the global handler fails on unknown words
        return [
            router.register(CMD_TTS, 3, self.conversation_command, self.HELP_CONV),
            router.register(CMD_TTS, 3, self.keyword_command, self.HELP_KEYWORD),
            router.register(CMD_TTS, 3, self.replace_command, self.HELP_REPLACE),
            router.register(CMD_TTS, 2, self.global_command, self.HELP_GLOBAL),
        ]

    # -- status lines -------------------------------------------------------

    def _log(self, conversation_id: ConversationId, message: str) -> None:
        self.plugin.log(conversation_id, message)

    def log_active(self, cid: ConversationId) -> None:
        state = "enabled" if self.plugin.state.global_active else "disabled"
        self._log(cid, f"{self.plugin.name} is {state}")

    def log_conversation(self, cid: ConversationId) -> None:
        state = self.plugin.state
        if state.has_override(cid):
            value = "enabled" if state.is_active(cid) else "disabled"
            self._log(cid, f"{self.plugin.name} is {value} for this conversation")
        else:
            value = "enabled" if state.global_active else "disabled"
            self._log(cid, f"{self.plugin.name} uses the default setting ({value}) for this conversation")

    def log_shell(self, cid: ConversationId) -> None:
        self._log(cid, f"{self.plugin.name} shell is: {self.plugin.settings.shell}")

    def log_profile(self, cid: ConversationId) -> None:
        self._log(cid, f"{self.plugin.name} profile is: {self.plugin.settings.profile}")

    def log_command(self, cid: ConversationId) -> None:
        self._log(cid, f"{self.plugin.name} command is: {self.plugin.profile.command}")

    def log_compose(self, cid: ConversationId) -> None:
        self._log(cid, f"{self.plugin.name} parameters are: {self.plugin.profile.compose}")

    def log_language(self, cid: ConversationId) -> None:
        self._log(cid, f"{self.plugin.name} language is: {self.plugin.profile.language}")

    def log_volume(self, cid: ConversationId) -> None:
        self._log(cid, f"{self.plugin.name} volume is: {self.plugin.profile.volume}")

    def log_keywords_active(self, cid: ConversationId) -> None:
        value = "enabled" if self.plugin.state.keywords_enabled else "disabled"
        self._log(cid, f"{self.plugin.name} keywords are: {value}")

    def log_keywords(self, cid: ConversationId) -> None:
        words = ", ".join(self.plugin.keywords.list()) or "(none)"
        self._log(cid, f"{self.plugin.name} active keywords: {words}")

    def log_replacements(self, cid: ConversationId) -> None:
        lines = [f"{self.plugin.name} active replacements:"]
        lines.extend(f"{pattern} => {replacement}" for pattern, replacement in self.plugin.replacements.list())
        self._log(cid, "\n".join(lines))

    def log_status(self, cid: ConversationId) -> None:
        self.log_active(cid)
        self.log_conversation(cid)
        self.log_shell(cid)
        self.log_profile(cid)
        self.log_command(cid)
        self.log_compose(cid)
        self.log_keywords_active(cid)
        self.log_keywords(cid)
        self.log_replacements(cid)

    # -- handlers -----------------------------------------------------------

    def conversation_command(self, cid: ConversationId, args: Args) -> CommandStatus:
        if args[0] != CMD_CONV:
            return CommandStatus.CONTINUE

        state = self.plugin.state
        if args[1] is None:
            pass
        elif args[2] is not None:
            raise CommandParseError(f"usage: {self.HELP_CONV}")
        elif args[1] == CMD_ENABLE:
            state.enable_conversation(cid)
        elif args[1] == CMD_DISABLE:
            state.disable_conversation(cid)
        else:
            raise CommandParseError(f"usage: {self.HELP_CONV}")

        self.log_conversation(cid)
        return CommandStatus.OK

    def keyword_command(self, cid: ConversationId, args: Args) -> CommandStatus:
        if args[0] != CMD_KEYWORD:
            return CommandStatus.CONTINUE

        if args[1] is None:
            self.log_keywords_active(cid)
        elif args[2] is None:
            if args[1] == CMD_ENABLE:
                self.plugin.state.set_keywords_enabled(True)
                self.plugin.save()
                self.log_keywords_active(cid)
            elif args[1] == CMD_DISABLE:
                self.plugin.state.set_keywords_enabled(False)
                self.plugin.save()
                self.log_keywords_active(cid)
            elif args[1] == CMD_KEYWORD_LIST:
                self.log_keywords(cid)
            else:
                raise CommandParseError(f"usage: {self.HELP_KEYWORD}")
        elif args[1] == CMD_KEYWORD_ADD:
            self.plugin.keywords.add(args[2])
            self.plugin.save()
            self.log_keywords(cid)
        elif args[1] == CMD_KEYWORD_REMOVE:
            self.plugin.keywords.remove(args[2])
            self.plugin.save()
            self.log_keywords(cid)
        else:
            raise CommandParseError(f"usage: {self.HELP_KEYWORD}")

        return CommandStatus.OK

    def replace_command(self, cid: ConversationId, args: Args) -> CommandStatus:
        if args[0] != CMD_REPLACE:
            return CommandStatus.CONTINUE

        if args[1] is None:
            self.log_replacements(cid)
        elif args[2] is None:
            self.plugin.replacements.remove(args[1])
            self.plugin.save()
            self._log(cid, f"{self.plugin.name} - deleted replacement for: {args[1]}")
        else:
            self.plugin.replacements.add(args[1], args[2])
            self.plugin.save()
            self._log(cid, f"{self.plugin.name} - added replacement for: {args[1]}")

        return CommandStatus.OK

    def global_command(self, cid: ConversationId, args: Args) -> CommandStatus:
        plugin = self.plugin
        command, value = args

        if command is None:
            self.log_active(cid)
            self.log_conversation(cid)
            return CommandStatus.OK

        if value is None:
            if command == CMD_ENABLE:
                plugin.state.set_global_active(True)
                plugin.state.set_conversation_inactive(cid, False)
                plugin.save()
                self.log_active(cid)
            elif command == CMD_DISABLE:
                plugin.state.set_global_active(False)
                plugin.state.set_conversation_active(cid, False)
                plugin.save()
                self.log_active(cid)
            elif command == CMD_SHELL:
                self.log_shell(cid)
            elif command == CMD_BIN:
                self.log_command(cid)
            elif command == CMD_COMPOSE:
                self.log_compose(cid)
            elif command == CMD_PROFILE:
                self.log_profile(cid)
            elif command == CMD_LANGUAGE:
                self.log_language(cid)
            elif command == CMD_VOLUME:
                self.log_volume(cid)
            elif command == CMD_STATUS:
                self.log_status(cid)
            elif command == CMD_STOP:
                plugin.stop_speech()
                self._log(cid, f"{plugin.name} - speech output stopped")
            else:
                return CommandStatus.FAILED
            return CommandStatus.OK

        if command == CMD_SHELL:
            plugin.set_shell(value)
            self.log_shell(cid)
        elif command == CMD_PROFILE:
            plugin.select_profile(value)
            self.log_profile(cid)
        elif command == CMD_BIN:
            plugin.profile.command = value
            plugin.save()
            self.log_command(cid)
        elif command == CMD_COMPOSE:
            validate_compose(value)
            plugin.profile.compose = value
            plugin.save()
            self.log_compose(cid)
        elif command == CMD_LANGUAGE:
            plugin.profile.language = value
            plugin.save()
            self.log_language(cid)
        elif command == CMD_VOLUME:
            plugin.profile.volume = value
            plugin.save()
            self.log_volume(cid)
        elif command == CMD_SAY:
            result = plugin.processor.say(cid, value)
            plugin.report_result(cid, result)
        elif command == CMD_TEST:
            result = plugin.processor.process(cid, value)
            if result.spoken:
                self._log(cid, f"{plugin.name} - echoing test string...")
            else:
                self._log(cid, f"{plugin.name} - not echoing test string")
            plugin.report_result(cid, result)
        else:
            return CommandStatus.FAILED

        return CommandStatus.OK
