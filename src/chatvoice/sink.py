"""Speech output through a persistent shell child process.

The shell is spawned once and fed one command line per message, so
messages are spoken one after another in arrival order.

SECURITY: the compose template is split into an argument vector before
any message text is inserted, and every argument is quoted with
shlex when the line is written. Message text always reaches the shell
as a single word.
"""

from __future__ import annotations

import logging
import os
import shlex
import signal
import string
import subprocess
import threading
from dataclasses import dataclass
from typing import Optional

from chatvoice.errors import CommandParseError, SinkSpawnError, SinkWriteError

logger = logging.getLogger(__name__)

COMPOSE_FIELDS = ("command", "language", "volume", "text")


@dataclass
class SpeechRequest:
    """Everything needed to build one speech command line."""

    command: str
    compose: str
    language: str
    volume: str
    text: str

    def argv(self) -> list[str]:
        fields = {
            "command": self.command,
            "language": self.language,
            "volume": self.volume,
            "text": self.text,
        }
        return [part.format(**fields) for part in shlex.split(self.compose)]

    def command_line(self) -> str:
        return shlex.join(self.argv())


def validate_compose(compose: str) -> None:
    """Check a compose template, raising CommandParseError if unusable."""
    try:
        parts = shlex.split(compose)
    except ValueError as e:
        raise CommandParseError(f"compose template is not valid shell syntax: {e}") from e
    if not parts:
        raise CommandParseError("compose template is empty")

    seen = set()
    formatter = string.Formatter()
    for part in parts:
        try:
            parsed = list(formatter.parse(part))
        except ValueError as e:
            raise CommandParseError(f"bad placeholder in {part!r}: {e}") from e
        for _, field, spec, conversion in parsed:
            if field is None:
                continue
            if field not in COMPOSE_FIELDS or spec or conversion:
                raise CommandParseError(
                    f"unknown placeholder {{{field}}}; use {', '.join('{%s}' % f for f in COMPOSE_FIELDS)}"
                )
            seen.add(field)
    if "text" not in seen:
        raise CommandParseError("compose template must contain {text}")


class ShellSink:
    """Writes speech commands to a long-lived shell."""

    def __init__(self, shell: str = "/bin/sh"):
        self.shell = shell
        self._proc: Optional[subprocess.Popen] = None
        self._lock = threading.Lock()
        self._reaper: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._proc is not None and self._proc.poll() is None

    def start(self) -> None:
        """Spawn the shell. Raises SinkSpawnError if it cannot be started."""
        try:
            self._proc = subprocess.Popen(
                [self.shell],
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                text=True,
                start_new_session=True,
            )
        except OSError as e:
            self._proc = None
            raise SinkSpawnError(f"could not start {self.shell}: {e}") from e
        logger.info("Speech shell started: %s (pid %d)", self.shell, self._proc.pid)

    def write_line(self, line: str) -> None:
        """Write one command line to the shell. Raises SinkWriteError."""
        with self._lock:
            if self._proc is None or self._proc.stdin is None:
                raise SinkWriteError("speech shell is not running")
            try:
                self._proc.stdin.write(line + "\n")
                self._proc.stdin.flush()
            except (OSError, ValueError) as e:
                raise SinkWriteError(f"could not write to {self.shell}: {e}") from e

    def speak(self, request: SpeechRequest) -> None:
        """Queue request for speaking. Raises SinkWriteError."""
        try:
            line = request.command_line()
        except (ValueError, KeyError, IndexError) as e:
            raise SinkWriteError(f"could not compose command: {e}") from e
        logger.debug("Echoing: %s%s", request.text[:50], "..." if len(request.text) > 50 else "")
        self.write_line(line)

    def stop(self, discard: bool = True) -> None:
        """Shut the shell down.

        With discard, the shell and anything it is still speaking are killed.
        Otherwise its input is closed and queued commands are left to finish.
        """
        with self._lock:
            proc, self._proc = self._proc, None
        if proc is None:
            return
        try:
            if proc.stdin is not None:
                proc.stdin.close()
        except OSError as e:
            logger.debug("Error closing speech shell input: %s", e)
        if discard and proc.poll() is None:
            try:
                os.killpg(proc.pid, signal.SIGTERM)
            except ProcessLookupError:
                pass
            try:
                proc.wait(timeout=2)
            except subprocess.TimeoutExpired:
                proc.kill()
                proc.wait()
        elif not discard:
            # Queued commands keep running; collect the exit status once they finish
            self._reaper = threading.Thread(target=proc.wait, name="chatvoice-reaper", daemon=True)
            self._reaper.start()
        logger.info("Speech shell stopped")

    def restart(self, shell: Optional[str] = None) -> None:
        """Stop the current shell and spawn a new one."""
        self.stop()
        if shell is not None:
            self.shell = shell
        self.start()
