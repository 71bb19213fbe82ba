"""Shared fixtures for ChatVoice tests."""

import pytest
import yaml

from chatvoice import config
from chatvoice.errors import SinkSpawnError, SinkWriteError
from chatvoice.plugin import Host, SpeechPlugin
from chatvoice.prefs import Preferences


class FakeSink:
    """Stands in for ShellSink and records what would have been spoken."""

    def __init__(self, fail_start=False, fail_write=False):
        self.fail_start = fail_start
        self.fail_write = fail_write
        self.requests = []
        self.started = 0
        self.stopped = []
        self.shell = "/bin/sh"

    def start(self):
        if self.fail_start:
            raise SinkSpawnError("could not start /bin/sh")
        self.started += 1

    def speak(self, request):
        if self.fail_write:
            raise SinkWriteError("broken pipe")
        self.requests.append(request)

    def stop(self, discard=True):
        self.stopped.append(discard)

    def restart(self, shell=None):
        self.stop()
        if shell is not None:
            self.shell = shell
        self.start()

    @property
    def spoken(self):
        return [request.text for request in self.requests]


class RecordingHost(Host):
    """Host that keeps status lines per conversation."""

    def __init__(self):
        self.lines = []

    def write_status(self, conversation_id, message):
        self.lines.append((conversation_id, message))

    def messages(self, conversation_id=None):
        return [m for c, m in self.lines if conversation_id is None or c == conversation_id]


@pytest.fixture
def tmp_config_dir(tmp_path):
    """Create a temporary config directory."""
    config_dir = tmp_path / ".config" / "chatvoice"
    config_dir.mkdir(parents=True)
    return config_dir


@pytest.fixture
def tmp_config_file(tmp_config_dir):
    """Create a temporary config.yaml file."""
    config_file = tmp_config_dir / "config.yaml"
    config_file.write_text(yaml.dump({"active": False, "shell": "/bin/bash"}))
    return config_file


@pytest.fixture
def config_path(tmp_config_dir, monkeypatch):
    """Point the default config location at a temporary file."""
    path = tmp_config_dir / "config.yaml"
    monkeypatch.setattr(config, "CONFIG_PATH", path)
    return path


@pytest.fixture
def prefs(config_path):
    """Preferences with default values, saved under tmp_path."""
    return Preferences.load(config_path)


@pytest.fixture
def sink():
    return FakeSink()


@pytest.fixture
def host():
    return RecordingHost()


@pytest.fixture
def plugin(host, prefs, sink):
    """A loaded plugin with a fake sink."""
    plugin = SpeechPlugin(host, prefs, sink=sink)
    plugin.load()
    yield plugin
    if plugin.loaded:
        plugin.unload()
