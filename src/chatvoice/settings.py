"""Typed view of the ChatVoice preferences."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from chatvoice.config import DEFAULT_CONFIG, DEFAULT_PROFILE, DEFAULT_PROFILE_CONFIG
from chatvoice.errors import CommandParseError, InvalidPattern
from chatvoice.prefs import Preferences
from chatvoice.replacements import Replacement
from chatvoice.sink import validate_compose

logger = logging.getLogger(__name__)


@dataclass
class Profile:
    """Speech command settings plus the word lists that go with them."""

    command: str = DEFAULT_PROFILE_CONFIG["command"]
    compose: str = DEFAULT_PROFILE_CONFIG["compose"]
    language: str = DEFAULT_PROFILE_CONFIG["language"]
    volume: str = DEFAULT_PROFILE_CONFIG["volume"]
    replacements: List[Replacement] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    keywords_active: bool = DEFAULT_PROFILE_CONFIG["keywords_active"]

    @classmethod
    def load(cls, prefs: Preferences, name: str) -> "Profile":
        base = f"profiles/{name}"
        if not prefs.has(base):
            return cls()

        def string(key: str) -> str:
            path = f"{base}/{key}"
            return prefs.get_string(path) if prefs.has(path) else DEFAULT_PROFILE_CONFIG[key]

        replacements = []
        if prefs.has(f"{base}/replacements"):
            replacements = _load_replacements(prefs.get_list(f"{base}/replacements"), name)
        keywords = prefs.get_string_list(f"{base}/keywords") if prefs.has(f"{base}/keywords") else []
        keywords_active = (
            prefs.get_bool(f"{base}/keywords_active")
            if prefs.has(f"{base}/keywords_active")
            else DEFAULT_PROFILE_CONFIG["keywords_active"]
        )

        compose = string("compose")
        try:
            validate_compose(compose)
        except CommandParseError as e:
            logger.warning("Profile %r: %s, using the default compose template", name, e)
            compose = DEFAULT_PROFILE_CONFIG["compose"]

        return cls(
            command=string("command"),
            compose=compose,
            language=string("language"),
            volume=string("volume"),
            replacements=replacements,
            keywords=keywords,
            keywords_active=keywords_active,
        )

    def store(self, prefs: Preferences, name: str) -> None:
        base = f"profiles/{name}"
        prefs.set_string(f"{base}/command", self.command)
        prefs.set_string(f"{base}/compose", self.compose)
        prefs.set_string(f"{base}/language", self.language)
        prefs.set_string(f"{base}/volume", self.volume)
        prefs.set_list(f"{base}/replacements", [r.to_dict() for r in self.replacements])
        prefs.set_string_list(f"{base}/keywords", self.keywords)
        prefs.set_bool(f"{base}/keywords_active", self.keywords_active)



def _load_replacements(items: list, profile_name: str) -> List[Replacement]:
    """Build replacement rules from config, skipping entries that cannot be used."""
    replacements: List[Replacement] = []
    seen = set()
    for item in items:
        try:
            rule = Replacement.from_dict(item)
        except InvalidPattern as e:
            logger.warning("Profile %r: skipping replacement %r: %s", profile_name, item, e)
            continue
        if rule.pattern in seen:
            logger.warning("Profile %r: skipping duplicate replacement for %r", profile_name, rule.pattern)
            continue
        seen.add(rule.pattern)
        replacements.append(rule)
    return replacements

@dataclass
class Settings:
    """Global settings and the profiles they select between."""

    active: bool = DEFAULT_CONFIG["active"]
    shell: str = DEFAULT_CONFIG["shell"]
    profile: str = DEFAULT_PROFILE
    profiles: Dict[str, Profile] = field(default_factory=lambda: {DEFAULT_PROFILE: Profile()})

    @property
    def current(self) -> Profile:
        """The selected profile, created from defaults if it is new."""
        if self.profile not in self.profiles:
            self.profiles[self.profile] = Profile()
        return self.profiles[self.profile]

    def select_profile(self, name: str) -> Profile:
        self.profile = name
        return self.current

    @classmethod
    def load(cls, prefs: Preferences) -> "Settings":
        names = list(prefs.data.get("profiles") or {}) or [DEFAULT_PROFILE]
        return cls(
            active=prefs.get_bool("active") if prefs.has("active") else DEFAULT_CONFIG["active"],
            shell=prefs.get_string("shell") if prefs.has("shell") else DEFAULT_CONFIG["shell"],
            profile=prefs.get_string("profile") if prefs.has("profile") else DEFAULT_PROFILE,
            profiles={name: Profile.load(prefs, name) for name in names},
        )

    def store(self, prefs: Preferences) -> None:
        prefs.set_bool("active", self.active)
        prefs.set_string("shell", self.shell)
        prefs.set_string("profile", self.profile)
        for name, profile in self.profiles.items():
            profile.store(prefs, name)
