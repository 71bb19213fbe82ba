"""Tests for chatvoice.config module."""

from __future__ import annotations

import yaml

from chatvoice import config
from chatvoice.config import DEFAULT_CONFIG, default_config, load_config, save_config


class TestLoadConfig:
    """Tests for load_config function."""

    def test_returns_defaults_when_no_config_file(self, monkeypatch, tmp_path):
        """load_config returns default values when config file does not exist."""
        non_existent = tmp_path / "does_not_exist" / "config.yaml"
        monkeypatch.setattr(config, "CONFIG_PATH", non_existent)

        result = load_config()

        assert result == DEFAULT_CONFIG

    def test_merges_user_overrides_from_file(self, tmp_config_file):
        """load_config merges user config values over defaults."""
        result = load_config(tmp_config_file)

        assert result["active"] is False
        assert result["shell"] == "/bin/bash"
        # Defaults should still be present
        assert result["profile"] == "espeak"
        assert result["profiles"]["espeak"]["command"] == "/usr/bin/espeak"

    def test_handles_empty_yaml_file(self, tmp_path):
        """load_config handles empty yaml file gracefully."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        assert load_config(config_file) == DEFAULT_CONFIG

    def test_partial_profile_gets_profile_defaults(self, tmp_path):
        """A profile that sets only some keys gets the rest from defaults."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({"profiles": {"english": {"language": "en"}}}))

        result = load_config(config_file)

        assert result["profiles"]["english"]["language"] == "en"
        assert result["profiles"]["english"]["command"] == "/usr/bin/espeak"
        assert "espeak" in result["profiles"]

    def test_does_not_mutate_defaults(self, tmp_path):
        """Editing a loaded config leaves DEFAULT_CONFIG alone."""
        result = load_config(tmp_path / "missing.yaml")
        result["profiles"]["espeak"]["keywords"].append("urgent")

        assert DEFAULT_CONFIG["profiles"]["espeak"]["keywords"] == []


class TestSaveConfig:
    """Tests for save_config function."""

    def test_creates_parent_directory(self, tmp_path):
        """save_config creates missing directories."""
        path = tmp_path / "a" / "b" / "config.yaml"

        save_config(default_config(), path)

        assert path.exists()

    def test_saved_file_loads_back(self, tmp_path):
        """A saved config loads back unchanged."""
        path = tmp_path / "config.yaml"
        data = default_config()
        data["active"] = False
        data["profiles"]["espeak"]["replacements"] = [{"pattern": "lol", "replacement": "haha"}]

        save_config(data, path)

        assert load_config(path) == data

    def test_writes_to_default_location(self, config_path):
        """Without a path, save_config writes CONFIG_PATH."""
        save_config(default_config())

        assert yaml.safe_load(config_path.read_text())["shell"] == "/bin/sh"
