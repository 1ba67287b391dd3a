"""Tests for the shape of the default rule catalog."""

from __future__ import annotations

from darkmode_detection.catalog import DEFAULT_CATALOG, STORAGE_KEYS, StorageRule
from darkmode_detection.types import ConfidenceTier, SignalKind


def test_kinds_appear_in_evaluation_order():
    assert DEFAULT_CATALOG.kinds() == (
        SignalKind.STORAGE,
        SignalKind.ATTRIBUTE,
        SignalKind.CLASS_NAME,
        SignalKind.LIBRARY,
        SignalKind.TOGGLE_CONTROL,
        SignalKind.CSS_VARIABLE,
        SignalKind.SYSTEM_PREFERENCE,
        SignalKind.COLOR_SCHEME_PROPERTY,
        SignalKind.UTILITY_DARK_CLASS,
    )


def test_each_kind_has_a_single_tier():
    expected = {
        SignalKind.STORAGE: ConfidenceTier.VERY_HIGH,
        SignalKind.ATTRIBUTE: ConfidenceTier.HIGH,
        SignalKind.CLASS_NAME: ConfidenceTier.HIGH,
        SignalKind.LIBRARY: ConfidenceTier.VERY_HIGH,
        SignalKind.TOGGLE_CONTROL: ConfidenceTier.HIGH,
        SignalKind.CSS_VARIABLE: ConfidenceTier.MEDIUM,
        SignalKind.SYSTEM_PREFERENCE: ConfidenceTier.LOW,
        SignalKind.COLOR_SCHEME_PROPERTY: ConfidenceTier.MEDIUM,
        SignalKind.UTILITY_DARK_CLASS: ConfidenceTier.VERY_HIGH,
    }
    for kind, tier in expected.items():
        assert {rule.tier for rule in DEFAULT_CATALOG.by_kind(kind)} == {tier}


def test_storage_keys_are_covered():
    rules = DEFAULT_CATALOG.by_kind(SignalKind.STORAGE)
    assert all(isinstance(rule, StorageRule) for rule in rules)
    assert tuple(rule.key for rule in rules) == STORAGE_KEYS
    assert "vueuse-color-scheme" in STORAGE_KEYS and "vite-ui-theme" in STORAGE_KEYS


def test_class_names_checked_on_root_and_body():
    assert len(DEFAULT_CATALOG.by_kind(SignalKind.CLASS_NAME)) == 16


def test_only_one_system_preference_rule():
    assert len(DEFAULT_CATALOG.by_kind(SignalKind.SYSTEM_PREFERENCE)) == 1


def test_without_expensive_keeps_cheap_rules():
    cheap = DEFAULT_CATALOG.without(expensive=True)
    assert SignalKind.UTILITY_DARK_CLASS not in cheap.kinds()
    assert [rule.name for rule in cheap.by_kind(SignalKind.LIBRARY)] == ["darkmode.js"]
    assert cheap.version == DEFAULT_CATALOG.version
    assert len(cheap) == len(DEFAULT_CATALOG) - 2
