#!/usr/bin/env python3
"""ChatVoice console - try the plugin from a terminal.

Usage:
    chatvoice run [--conversation NAME] [--config PATH] [-v]
    chatvoice say "Text to speak"
    echo "Text to speak" | chatvoice say

Inside ``run``:
    /tts ...        Run a ChatVoice command in the current conversation
    /join NAME      Switch to another conversation
    /close [NAME]   Close a conversation (defaults to the current one)
    /quit           Exit
    anything else   Treated as an incoming message
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional, TextIO

from chatvoice.activation import ActivationState, ConversationId
from chatvoice.commands import CommandStatus
from chatvoice.errors import SinkSpawnError
from chatvoice.keywords import KeywordSet
from chatvoice.plugin import Host, SpeechPlugin
from chatvoice.prefs import Preferences
from chatvoice.processor import MessageProcessor
from chatvoice.replacements import ReplacementTable
from chatvoice.settings import Settings
from chatvoice.sink import ShellSink


class ConsoleHost(Host):
    """Host that prints status lines to a terminal."""

    def __init__(self, out: Optional[TextIO] = None):
        self.out = out or sys.stdout

    def write_status(self, conversation_id: ConversationId, message: str) -> None:
        for line in message.splitlines() or [""]:
            print(f"[{conversation_id}] *** {line}", file=self.out)


def run_console(plugin: SpeechPlugin, lines: Iterable[str], conversation: str = "console") -> None:
    """Feed lines to the plugin until they run out or /quit is read."""
    host_out = getattr(plugin.host, "out", sys.stdout)
    current = conversation

    for raw in lines:
        line = raw.rstrip("\n")
        if not line.strip():
            continue

        word, _, rest = line.strip().partition(" ")
        if word == "/quit":
            break
        elif word == "/join":
            if rest.strip():
                current = rest.strip()
            print(f"💬 Conversation: {current}", file=host_out)
        elif word == "/close":
            name = rest.strip() or current
            plugin.on_conversation_closed(name)
            print(f"👋 Closed: {name}", file=host_out)
        elif line.startswith("/"):
            status = plugin.on_command(current, line)
            if status is CommandStatus.CONTINUE:
                print(f"❌ Unknown command: {word}", file=host_out)
        else:
            plugin.on_message(current, line)


def say(text: str, prefs: Preferences) -> bool:
    """Speak text once with the configured profile, ignoring activation state."""
    settings = Settings.load(prefs)
    profile = settings.current
    sink = ShellSink(settings.shell)
    try:
        sink.start()
    except SinkSpawnError as e:
        print(f"❌ {e}", file=sys.stderr)
        return False

    processor = MessageProcessor(
        ActivationState(),
        KeywordSet(profile.keywords),
        ReplacementTable(profile.replacements),
        sink,
        profile,
    )
    result = processor.say(None, text)
    sink.stop(discard=False)

    if result.error is not None:
        print(f"❌ {result.error}", file=sys.stderr)
        return False
    return True


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="chatvoice", description="Read chat messages aloud")
    parser.add_argument("--config", "-c", type=Path, help="Config file (default ~/.config/chatvoice/config.yaml)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Interactive console host")
    run_parser.add_argument("--conversation", default="console", help="Initial conversation name")

    say_parser = subparsers.add_parser("say", help="Speak text once")
    say_parser.add_argument("text", nargs="*", help="Text to speak (default: stdin)")

    args = parser.parse_args(argv)

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if args.verbose else logging.INFO,
    )

    prefs = Preferences.load(args.config)

    if args.command == "say":
        if args.text:
            text = " ".join(args.text)
        elif not sys.stdin.isatty():
            text = sys.stdin.read()
        else:
            print("No text provided. Use: echo 'text' | chatvoice say", file=sys.stderr)
            return 1
        return 0 if say(text, prefs) else 1

    if args.command != "run":
        parser.print_help()
        return 1

    plugin = SpeechPlugin(ConsoleHost(), prefs)
    plugin.load()
    print(f"✨ {plugin.name} ready! Type /tts status, or /quit to exit.")
    try:
        run_console(plugin, sys.stdin, args.conversation)
    except KeyboardInterrupt:
        print()
    finally:
        plugin.unload()
    return 0


if __name__ == "__main__":
    sys.exit(main())
