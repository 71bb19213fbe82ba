"""Exceptions raised by ChatVoice."""


class ChatVoiceError(Exception):
    """Base class for all ChatVoice errors."""


class InvalidPattern(ChatVoiceError, ValueError):
    """A replacement rule was given an empty pattern."""


class CommandParseError(ChatVoiceError):
    """A chat command had the wrong arguments."""


class SinkSpawnError(ChatVoiceError):
    """The speech child process could not be started."""


class SinkWriteError(ChatVoiceError):
    """A command line could not be written to the speech child process."""
