"""Reduce collected signals into a confidence tier, theme and labels."""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Tuple

from .page import PageState
from .types import ConfidenceTier, Signal, SignalKind, Theme

logger = logging.getLogger(__name__)

# Checked top-down; the first threshold reached wins.
TIER_THRESHOLDS: Tuple[Tuple[int, ConfidenceTier], ...] = (
    (12, ConfidenceTier.VERY_HIGH),
    (8, ConfidenceTier.HIGH),
    (4, ConfidenceTier.MEDIUM),
)

THEME_STORAGE_KEYS = ("theme", "darkMode", "color-scheme")
THEME_ATTRIBUTES = ("data-theme", "data-bs-theme")

# Attribute names that identify a specific component framework.
FRAMEWORK_ATTRIBUTES = {
    "data-bs-theme": "bootstrap",
    "data-mui-color-scheme": "material-ui",
}


def total_weight(signals: Iterable[Signal]) -> int:
    return sum(signal.weight for signal in signals)


def aggregate(signals: Iterable[Signal]) -> ConfidenceTier:
    """Map the summed signal weight onto a confidence tier.

    An empty signal list is ``LOW``: a tier is always defined, even when the
    page shows no dark-mode evidence at all.
    """

    weight = total_weight(signals)
    for threshold, tier in TIER_THRESHOLDS:
        if weight >= threshold:
            return tier
    return ConfidenceTier.LOW


def resolve_theme(page: PageState) -> str:
    """Best guess at the theme currently applied to ``page``.

    Priority, first match wins:

    1. storage ``theme``, ``darkMode`` or ``color-scheme`` set to exactly
       ``dark`` or ``light``;
    2. the root ``data-theme`` attribute, else ``data-bs-theme``, verbatim;
    3. root class ``dark``, then ``light``;
    4. ``unknown``.
    """

    for key in THEME_STORAGE_KEYS:
        try:
            value = page.storage.get(key)
        except Exception as exc:
            logger.debug("Storage key %s unreadable: %s", key, exc)
            continue
        if value in (Theme.DARK.value, Theme.LIGHT.value):
            return value

    root = page.root
    if root is None:
        return Theme.UNKNOWN.value

    for attribute in THEME_ATTRIBUTES:
        try:
            value = root.get_attribute(attribute)
        except Exception as exc:
            logger.debug("Attribute %s unreadable: %s", attribute, exc)
            continue
        if value:
            return value

    for theme in (Theme.DARK, Theme.LIGHT):
        try:
            if root.has_class(theme.value):
                return theme.value
        except Exception as exc:
            logger.debug("Class lookup on root failed: %s", exc)
            break

    return Theme.UNKNOWN.value


def implementation_tags(signals: Sequence[Signal]) -> Tuple[str, ...]:
    """Coarse implementation labels in the order their evidence appeared."""

    tags: List[str] = []

    def add(tag: str) -> None:
        if tag not in tags:
            tags.append(tag)

    for signal in signals:
        if signal.kind is SignalKind.STORAGE:
            add("javascript")
        elif signal.kind is SignalKind.ATTRIBUTE:
            add("custom")
            framework = FRAMEWORK_ATTRIBUTES.get(signal.detail.get("attribute", ""))
            if framework:
                add(framework)
        elif signal.kind is SignalKind.CLASS_NAME:
            add("class-toggle")
        elif signal.kind is SignalKind.LIBRARY:
            add(signal.detail["name"])
        elif signal.kind is SignalKind.UTILITY_DARK_CLASS:
            add("utility-css-framework")
    return tuple(tags)
