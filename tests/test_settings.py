"""Tests for chatvoice.prefs and chatvoice.settings modules."""

import pytest
import yaml

from chatvoice.config import default_config
from chatvoice.prefs import Preferences
from chatvoice.replacements import Replacement
from chatvoice.settings import Profile, Settings


class TestPreferences:
    """Tests for the typed key/value accessors."""

    def test_get_nested_string(self):
        """Paths walk into nested mappings."""
        prefs = Preferences(default_config())

        assert prefs.get_string("profiles/espeak/language") == "de"

    def test_get_bool(self):
        prefs = Preferences(default_config())
        assert prefs.get_bool("active") is True

    def test_missing_key_raises(self):
        """Getting an unknown path raises KeyError."""
        prefs = Preferences(default_config())

        with pytest.raises(KeyError):
            prefs.get_string("profiles/festival/language")
        assert prefs.has("profiles/festival/language") is False

    def test_set_creates_intermediate_mappings(self):
        """Setting a deep path creates the mappings on the way."""
        prefs = Preferences({})

        prefs.set_string("profiles/festival/language", "en")

        assert prefs.data == {"profiles": {"festival": {"language": "en"}}}

    def test_string_list_roundtrip(self):
        prefs = Preferences({})
        prefs.set_string_list("profiles/x/keywords", ["a", "b"])
        assert prefs.get_string_list("profiles/x/keywords") == ["a", "b"]

    def test_empty_path_raises(self):
        with pytest.raises(KeyError):
            Preferences({}).get_bool("/")

    def test_save_writes_yaml(self, tmp_path):
        """save writes the data to the preference file."""
        path = tmp_path / "config.yaml"
        prefs = Preferences(default_config(), path)
        prefs.set_bool("active", False)

        prefs.save()

        assert yaml.safe_load(path.read_text())["active"] is False


class TestSettings:
    """Tests for the typed Settings record."""

    def test_load_defaults(self):
        """Default preferences give default settings."""
        settings = Settings.load(Preferences(default_config()))

        assert settings.active is True
        assert settings.shell == "/bin/sh"
        assert settings.profile == "espeak"
        assert settings.current == Profile()

    def test_load_replacements_as_records(self):
        """Replacement tables load as Replacement records."""
        data = default_config()
        data["profiles"]["espeak"]["replacements"] = [{"pattern": "lol", "replacement": "haha"}]

        settings = Settings.load(Preferences(data))

        assert settings.current.replacements == [Replacement("lol", "haha")]

    def test_store_roundtrip(self):
        """Stored settings load back equal."""
        prefs = Preferences(default_config())
        settings = Settings.load(prefs)
        settings.active = False
        settings.current.keywords.append("urgent")
        settings.current.replacements.append(Replacement("brb", "be right back"))
        settings.select_profile("english").language = "en"

        settings.store(prefs)

        assert Settings.load(prefs) == settings

    def test_unknown_profile_created_from_defaults(self):
        """Selecting a new profile creates it with default values."""
        settings = Settings()

        profile = settings.select_profile("festival")

        assert profile == Profile()
        assert "festival" in settings.profiles

    def test_profiles_do_not_share_lists(self):
        """Each profile has its own keyword list."""
        settings = Settings()
        settings.current.keywords.append("urgent")

        assert settings.select_profile("other").keywords == []

    def test_missing_profile_keys_use_defaults(self):
        """A profile missing keys gets the default values."""
        prefs = Preferences({"profile": "bare", "profiles": {"bare": {"language": "fr"}}})

        settings = Settings.load(prefs)

        assert settings.current.language == "fr"
        assert settings.current.command == "/usr/bin/espeak"
        assert settings.current.keywords == []

    def test_empty_replacement_pattern_skipped(self, caplog):
        """A hand-edited empty pattern is dropped instead of matching everywhere."""
        data = default_config()
        data["profiles"]["espeak"]["replacements"] = [
            {"pattern": "", "replacement": "X"},
            {"pattern": "lol", "replacement": "haha"},
        ]

        with caplog.at_level("WARNING"):
            settings = Settings.load(Preferences(data))

        assert settings.current.replacements == [Replacement("lol", "haha")]
        assert "skipping replacement" in caplog.text

    def test_malformed_replacement_entries_skipped(self):
        """Entries that are not pattern/replacement mappings are ignored."""
        data = default_config()
        data["profiles"]["espeak"]["replacements"] = ["a", "b", {"replacement": "x"}, None]

        settings = Settings.load(Preferences(data))

        assert settings.current.replacements == []

    def test_duplicate_replacement_pattern_keeps_first(self):
        data = default_config()
        data["profiles"]["espeak"]["replacements"] = [
            {"pattern": "lol", "replacement": "haha"},
            {"pattern": "lol", "replacement": "hehe"},
        ]

        settings = Settings.load(Preferences(data))

        assert settings.current.replacements == [Replacement("lol", "haha")]

    def test_compose_without_text_falls_back_to_default(self, caplog):
        """A printf-style template has no {text} field and is replaced."""
        data = default_config()
        data["profiles"]["espeak"]["compose"] = "%s -v %s -a %s '%s'"

        with caplog.at_level("WARNING"):
            settings = Settings.load(Preferences(data))

        assert settings.current.compose == "{command} -v {language} -a {volume} {text}"
        assert "default compose template" in caplog.text

    def test_valid_custom_compose_kept(self):
        data = default_config()
        data["profiles"]["espeak"]["compose"] = "{command} {text}"

        settings = Settings.load(Preferences(data))

        assert settings.current.compose == "{command} {text}"
