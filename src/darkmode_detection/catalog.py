"""The static table of detection rules.

Rules are plain data. :mod:`darkmode_detection.collector` interprets them, so
adding a check means adding a row here rather than writing a new method.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Tuple

from .types import ConfidenceTier, SignalKind


class Target(str, Enum):
    ROOT = "html"
    BODY = "body"


class Polarity(str, Enum):
    """Which classification of a CSS variable's color counts as evidence."""

    DARK = "dark"
    LIGHT = "light"


@dataclass(frozen=True)
class Rule:
    kind: SignalKind
    tier: ConfidenceTier
    # Rules that walk the whole document; callers may skip them.
    expensive: bool = False


@dataclass(frozen=True)
class StorageRule(Rule):
    key: str = ""
    values: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AttributeRule(Rule):
    target: Target = Target.ROOT
    attribute: str = ""
    value: str = ""


@dataclass(frozen=True)
class ClassNameRule(Rule):
    target: Target = Target.ROOT
    class_name: str = ""


@dataclass(frozen=True)
class LibraryRule(Rule):
    name: str = ""
    selectors: Tuple[str, ...] = ()
    global_names: Tuple[str, ...] = ()
    body_classes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SelectorRule(Rule):
    selector: str = ""


@dataclass(frozen=True)
class CssVariableRule(Rule):
    variable: str = ""
    polarity: Polarity = Polarity.DARK


@dataclass(frozen=True)
class MediaRule(Rule):
    query: str = ""


@dataclass(frozen=True)
class StylePropertyRule(Rule):
    prop: str = ""
    contains: str = ""


@dataclass(frozen=True)
class ClassPrefixRule(Rule):
    prefix: str = ""
    sample_limit: int = 5


@dataclass(frozen=True)
class SignalCatalog:
    """An ordered, immutable, versioned collection of rules."""

    version: str
    rules: Tuple[Rule, ...]

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def kinds(self) -> Tuple[SignalKind, ...]:
        seen = []
        for rule in self.rules:
            if rule.kind not in seen:
                seen.append(rule.kind)
        return tuple(seen)

    def by_kind(self, kind: SignalKind) -> Tuple[Rule, ...]:
        return tuple(rule for rule in self.rules if rule.kind is kind)

    def without(self, kinds: Iterable[SignalKind] = (), expensive: bool = False) -> "SignalCatalog":
        """Return a copy dropping the given kinds and, optionally, expensive rules."""

        excluded = frozenset(kinds)
        rules = tuple(
            rule
            for rule in self.rules
            if rule.kind not in excluded and not (expensive and rule.expensive)
        )
        return SignalCatalog(version=self.version, rules=rules)


STORAGE_KEYS = (
    "theme",
    "darkMode",
    "dark-mode",
    "color-scheme",
    "theme-preference",
    "vueuse-color-scheme",
    "vite-ui-theme",
)
STORAGE_DARK_VALUES = ("dark", "enabled", "true")

ATTRIBUTE_CHECKS = (
    (Target.ROOT, "data-theme", "dark"),
    (Target.ROOT, "data-theme", "light"),
    (Target.ROOT, "data-bs-theme", "dark"),
    (Target.ROOT, "data-mui-color-scheme", "dark"),
    (Target.ROOT, "data-mode", "dark"),
    (Target.ROOT, "color-mode", "dark"),
    (Target.BODY, "data-theme", "dark"),
)

THEME_CLASS_NAMES = (
    "dark",
    "light",
    "dark-mode",
    "light-mode",
    "dark-theme",
    "light-theme",
    "theme-dark",
    "theme-light",
)

TOGGLE_SELECTORS = (
    "[data-theme-toggle]",
    "[data-toggle-theme]",
    ".theme-toggle",
    ".theme-switch",
    ".theme-switcher",
    ".dark-mode-toggle",
    ".dark-mode-switch",
    '[aria-label*="dark"]',
    '[aria-label*="light"]',
    '[aria-label*="theme"]',
    '[aria-label*="mode"]',
)

BACKGROUND_VARIABLES = ("--background", "--bg", "--background-color", "--bg-color", "--color-background")
TEXT_VARIABLES = ("--text-color", "--text", "--foreground", "--color-text")

DARK_MEDIA_QUERY = "(prefers-color-scheme: dark)"
UTILITY_DARK_PREFIX = "dark:"


def _build_default_rules() -> Tuple[Rule, ...]:
    rules = []

    for key in STORAGE_KEYS:
        rules.append(
            StorageRule(SignalKind.STORAGE, ConfidenceTier.VERY_HIGH, key=key, values=STORAGE_DARK_VALUES)
        )

    for target, attribute, value in ATTRIBUTE_CHECKS:
        rules.append(
            AttributeRule(SignalKind.ATTRIBUTE, ConfidenceTier.HIGH, target=target, attribute=attribute, value=value)
        )

    for target in (Target.ROOT, Target.BODY):
        for class_name in THEME_CLASS_NAMES:
            rules.append(
                ClassNameRule(SignalKind.CLASS_NAME, ConfidenceTier.HIGH, target=target, class_name=class_name)
            )

    rules.append(
        LibraryRule(
            SignalKind.LIBRARY,
            ConfidenceTier.VERY_HIGH,
            name="darkmode.js",
            selectors=(".darkmode-layer", ".darkmode-toggle"),
            body_classes=("darkmode--activated",),
        )
    )
    rules.append(
        LibraryRule(
            SignalKind.LIBRARY,
            ConfidenceTier.VERY_HIGH,
            expensive=True,
            name="darkreader",
            selectors=('[class*="darkreader"]',),
            global_names=("DarkReader",),
        )
    )

    for selector in TOGGLE_SELECTORS:
        rules.append(SelectorRule(SignalKind.TOGGLE_CONTROL, ConfidenceTier.HIGH, selector=selector))

    for variable in BACKGROUND_VARIABLES:
        rules.append(
            CssVariableRule(SignalKind.CSS_VARIABLE, ConfidenceTier.MEDIUM, variable=variable, polarity=Polarity.DARK)
        )
    for variable in TEXT_VARIABLES:
        rules.append(
            CssVariableRule(SignalKind.CSS_VARIABLE, ConfidenceTier.MEDIUM, variable=variable, polarity=Polarity.LIGHT)
        )

    rules.append(MediaRule(SignalKind.SYSTEM_PREFERENCE, ConfidenceTier.LOW, query=DARK_MEDIA_QUERY))
    rules.append(
        StylePropertyRule(SignalKind.COLOR_SCHEME_PROPERTY, ConfidenceTier.MEDIUM, prop="color-scheme", contains="dark")
    )
    rules.append(
        ClassPrefixRule(
            SignalKind.UTILITY_DARK_CLASS,
            ConfidenceTier.VERY_HIGH,
            expensive=True,
            prefix=UTILITY_DARK_PREFIX,
        )
    )
    return tuple(rules)


DEFAULT_CATALOG = SignalCatalog(version="1.0", rules=_build_default_rules())
