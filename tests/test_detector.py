"""Integration style tests for the detector orchestration."""

from __future__ import annotations

import pytest

from darkmode_detection import ConfidenceTier, DarkModeDetector, SignalCatalog, SignalKind, detect
from darkmode_detection.config import DetectionConfig
from darkmode_detection.errors import PageStateError
from darkmode_detection.markup import MarkupPage

from . import page_factory as factory


@pytest.fixture(scope="module")
def detector() -> DarkModeDetector:
    return DarkModeDetector()


def test_bare_page_still_reports_a_feature(detector):
    result = detector.detect(factory.create_blank_page())
    assert result.has_dark_mode is True
    assert result.confidence is ConfidenceTier.LOW
    assert result.current_theme == "unknown"
    assert [signal.kind for signal in result.signals] == [SignalKind.SYSTEM_PREFERENCE]


def test_no_signals_means_no_feature():
    detector = DarkModeDetector(skip_kinds=[SignalKind.SYSTEM_PREFERENCE])
    result = detector.detect(factory.create_blank_page())
    assert result.has_dark_mode is False
    assert result.confidence is ConfidenceTier.LOW
    assert result.signals == ()


def test_empty_catalog_is_respected():
    detector = DarkModeDetector(SignalCatalog(version="empty", rules=()))
    result = detector.detect(factory.create_tailwind_page())
    assert result.signals == ()
    assert result.confidence is ConfidenceTier.LOW
    # Theme resolution reads the page directly, not the signals.
    assert result.current_theme == "dark"


def test_storage_only_page_is_medium(detector):
    result = detector.detect(factory.create_storage_page("dark"))
    assert result.confidence is ConfidenceTier.MEDIUM
    assert result.current_theme == "dark"
    assert result.implementation == ("javascript",)


def test_tailwind_page_reaches_very_high(detector):
    result = detector.detect(factory.create_tailwind_page())
    weights = [signal.weight for signal in result.signals]
    assert weights == [4, 3, 1, 4]
    assert result.confidence is ConfidenceTier.VERY_HIGH
    assert result.current_theme == "dark"
    assert result.implementation == ("javascript", "class-toggle", "utility-css-framework")


def test_tailwind_page_without_system_preference_is_high():
    detector = DarkModeDetector(skip_kinds=[SignalKind.SYSTEM_PREFERENCE])
    result = detector.detect(factory.create_tailwind_page())
    assert sum(signal.weight for signal in result.signals) == 11
    assert result.confidence is ConfidenceTier.HIGH


def test_bootstrap_attribute_alone_stays_low():
    detector = DarkModeDetector(skip_kinds=[SignalKind.SYSTEM_PREFERENCE])
    result = detector.detect(factory.create_bootstrap_page())
    assert result.confidence is ConfidenceTier.LOW
    assert result.current_theme == "dark"
    assert result.implementation == ("custom", "bootstrap")


def test_summary_is_derived_from_signals(detector):
    page = factory.create_page(
        html_attrs='class="dark"',
        body='<div class="darkmode-toggle"></div>',
        global_names=["DarkReader"],
        root_styles={"--background": "#000000"},
    )
    result = detector.detect(page)
    summary = result.summary
    assert summary.total_signals == len(result.signals)
    assert summary.tier_counts[ConfidenceTier.VERY_HIGH] == 2
    assert summary.tier_counts[ConfidenceTier.HIGH] == 1
    assert summary.tier_counts[ConfidenceTier.MEDIUM] == 1
    assert summary.tier_counts[ConfidenceTier.LOW] == 1
    assert summary.detected_libraries == ("darkmode.js", "darkreader")


def test_detection_is_idempotent(detector):
    page = factory.create_tailwind_page()
    assert detector.detect(page) == detector.detect(page)


def test_result_serializes_to_plain_data(detector):
    page = factory.create_page(html_attrs='class="dark"', url="https://example.test/")
    payload = detector.detect(page).to_dict()
    assert payload["has_dark_mode"] is True
    assert payload["confidence"] == "medium"
    assert payload["current_theme"] == "dark"
    assert payload["url"] == "https://example.test/"
    assert payload["signals"][0] == {
        "kind": "class-name",
        "confidence": "high",
        "weight": 3,
        "class_name": "dark",
        "element": "html",
    }
    assert payload["summary"]["high_signals"] == 1


def test_predict_labels(detector):
    labels = detector.predict_labels(factory.create_bootstrap_page())
    assert labels == ["attribute", "system-preference"]


def test_available_kinds_matches_expected(detector):
    assert set(detector.available_kinds()) == set(SignalKind)


def test_from_config_applies_switches():
    config = DetectionConfig(skip_expensive=True, disabled_kinds=(SignalKind.TOGGLE_CONTROL,))
    detector = DarkModeDetector.from_config(config)
    kinds = set(detector.available_kinds())
    assert SignalKind.UTILITY_DARK_CLASS not in kinds
    assert SignalKind.TOGGLE_CONTROL not in kinds
    assert SignalKind.LIBRARY in kinds


def test_module_level_detect_and_precondition():
    assert detect(factory.create_bootstrap_page()).current_theme == "dark"
    with pytest.raises(PageStateError):
        detect(MarkupPage(""))


def test_signals_and_results_are_hashable(detector):
    first = detector.detect(factory.create_tailwind_page())
    second = detector.detect(factory.create_tailwind_page())

    assert hash(first) == hash(second)
    assert len({first, second}) == 1
    assert len(set(first.signals)) == len(first.signals)
