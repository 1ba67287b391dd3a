"""Unit tests for individual rule kinds using in-memory pages."""

from __future__ import annotations

import pytest

from darkmode_detection.catalog import DEFAULT_CATALOG, SelectorRule, SignalCatalog
from darkmode_detection.collector import SignalCollector, collect, evaluate_rule
from darkmode_detection.errors import PageStateError
from darkmode_detection.markup import MarkupPage
from darkmode_detection.types import ConfidenceTier, SignalKind

from . import page_factory as factory


def _kinds(signals):
    return [signal.kind for signal in signals]


def _of_kind(signals, kind: SignalKind):
    return [signal for signal in signals if signal.kind is kind]


def test_blank_page_only_reports_system_preference():
    signals = collect(DEFAULT_CATALOG, factory.create_blank_page())
    assert _kinds(signals) == [SignalKind.SYSTEM_PREFERENCE]
    assert signals[0].tier is ConfidenceTier.LOW
    assert signals[0].detail["prefers_dark"] is False


def test_system_preference_reports_dark_media_match():
    signals = collect(DEFAULT_CATALOG, factory.create_page(prefers_dark=True))
    (signal,) = _of_kind(signals, SignalKind.SYSTEM_PREFERENCE)
    assert signal.detail["prefers_dark"] is True


@pytest.mark.parametrize("value", ["dark", "enabled", "true"])
def test_storage_dark_values_fire(value: str):
    signals = collect(DEFAULT_CATALOG, factory.create_storage_page(value, key="vite-ui-theme"))
    (signal,) = _of_kind(signals, SignalKind.STORAGE)
    assert signal.tier is ConfidenceTier.VERY_HIGH
    assert signal.weight == 4
    assert dict(signal.detail) == {"key": "vite-ui-theme", "value": value}


@pytest.mark.parametrize("value", ["light", "Dark", "1", ""])
def test_storage_other_values_do_not_fire(value: str):
    signals = collect(DEFAULT_CATALOG, factory.create_storage_page(value))
    assert _of_kind(signals, SignalKind.STORAGE) == []


def test_denied_storage_is_not_fatal():
    page = factory.create_page(html_attrs='class="dark"', storage={"theme": "dark"}, storage_denied=True)
    signals = collect(DEFAULT_CATALOG, page)
    assert _of_kind(signals, SignalKind.STORAGE) == []
    assert len(_of_kind(signals, SignalKind.CLASS_NAME)) == 1


def test_attribute_rules_on_root_and_body():
    page = factory.create_page(
        html_attrs='data-theme="light" data-mui-color-scheme="dark"',
        body_attrs='data-theme="dark"',
    )
    signals = _of_kind(collect(DEFAULT_CATALOG, page), SignalKind.ATTRIBUTE)
    details = [(s.detail["element"], s.detail["attribute"], s.detail["value"]) for s in signals]
    assert details == [
        ("html", "data-theme", "light"),
        ("html", "data-mui-color-scheme", "dark"),
        ("body", "data-theme", "dark"),
    ]
    assert all(s.tier is ConfidenceTier.HIGH for s in signals)


def test_class_names_on_root_and_body():
    page = factory.create_page(html_attrs='class="theme-dark other"', body_attrs='class="light-mode"')
    signals = _of_kind(collect(DEFAULT_CATALOG, page), SignalKind.CLASS_NAME)
    assert [(s.detail["element"], s.detail["class_name"]) for s in signals] == [
        ("html", "theme-dark"),
        ("body", "light-mode"),
    ]


def test_darkmode_js_fingerprints():
    by_layer = factory.create_page(body='<div class="darkmode-layer"></div>')
    by_body_class = factory.create_page(body_attrs='class="darkmode--activated"')
    for page in (by_layer, by_body_class):
        (signal,) = _of_kind(collect(DEFAULT_CATALOG, page), SignalKind.LIBRARY)
        assert signal.detail["name"] == "darkmode.js"


def test_darkreader_via_global_or_injected_class():
    by_global = factory.create_page(global_names=["DarkReader"])
    by_class = factory.create_page(body='<style class="darkreader darkreader--fallback"></style>')
    for page in (by_global, by_class):
        (signal,) = _of_kind(collect(DEFAULT_CATALOG, page), SignalKind.LIBRARY)
        assert signal.detail["name"] == "darkreader"


def test_toggle_controls_fire_once_per_selector():
    page = factory.create_page(body='<button aria-label="Switch to dark mode">☾</button>')
    signals = _of_kind(collect(DEFAULT_CATALOG, page), SignalKind.TOGGLE_CONTROL)
    assert [s.detail["selector"] for s in signals] == ['[aria-label*="dark"]', '[aria-label*="mode"]']


def test_css_variables_respect_polarity():
    page = factory.create_page(
        root_styles={
            "--background": "#121212",
            "--bg": "#ffffff",
            "--text-color": " rgb(240, 240, 240) ",
            "--foreground": "222.2 84% 4.9%",
        }
    )
    signals = _of_kind(collect(DEFAULT_CATALOG, page), SignalKind.CSS_VARIABLE)
    assert [(s.detail["variable"], s.detail["value"]) for s in signals] == [
        ("--background", "#121212"),
        ("--text-color", "rgb(240, 240, 240)"),
    ]
    assert all(s.weight == 2 for s in signals)


def test_color_scheme_property():
    page = factory.create_page(root_styles={"color-scheme": "light dark"})
    (signal,) = _of_kind(collect(DEFAULT_CATALOG, page), SignalKind.COLOR_SCHEME_PROPERTY)
    assert signal.detail["value"] == "light dark"

    light_only = factory.create_page(root_styles={"color-scheme": "light"})
    assert _of_kind(collect(DEFAULT_CATALOG, light_only), SignalKind.COLOR_SCHEME_PROPERTY) == []


def test_utility_dark_classes_are_sampled():
    page = factory.create_tailwind_page()
    (signal,) = _of_kind(collect(DEFAULT_CATALOG, page), SignalKind.UTILITY_DARK_CLASS)
    assert signal.detail["classes"] == ("dark:bg-gray-900", "dark:text-white")


def test_skip_expensive_drops_document_scans():
    page = factory.create_page(
        body='<div class="dark:bg-black"></div><style class="darkreader"></style>',
    )
    full = collect(DEFAULT_CATALOG, page)
    cheap = collect(DEFAULT_CATALOG, page, skip_expensive=True)
    assert SignalKind.UTILITY_DARK_CLASS in _kinds(full)
    assert SignalKind.LIBRARY in _kinds(full)
    assert _kinds(cheap) == [SignalKind.SYSTEM_PREFERENCE]


def test_skip_kinds():
    collector = SignalCollector(skip_kinds=[SignalKind.SYSTEM_PREFERENCE])
    assert collector.collect(factory.create_blank_page()) == ()


def test_invalid_selector_is_treated_as_no_match():
    page = factory.create_blank_page()
    rule = SelectorRule(SignalKind.TOGGLE_CONTROL, ConfidenceTier.HIGH, selector="[[[not a selector")
    assert evaluate_rule(rule, page) is None

    catalog = SignalCatalog(version="test", rules=(rule,) + DEFAULT_CATALOG.rules)
    assert _kinds(collect(catalog, page)) == [SignalKind.SYSTEM_PREFERENCE]


class _BrokenQueryPage(MarkupPage):
    def query_selector(self, selector: str) -> bool:
        raise RuntimeError("selector engine unavailable")

    def matches_media(self, query: str) -> bool:
        raise RuntimeError("matchMedia unavailable")


def test_failing_host_capabilities_do_not_abort_collection():
    page = _BrokenQueryPage(
        factory.build_markup(html_attrs='class="dark"', body='<button class="theme-toggle"></button>'),
    )
    signals = collect(DEFAULT_CATALOG, page)
    assert _kinds(signals) == [SignalKind.CLASS_NAME, SignalKind.SYSTEM_PREFERENCE]
    assert signals[1].detail["prefers_dark"] is None


def test_collection_does_not_mutate_page():
    page = factory.create_tailwind_page()
    before = str(page.soup)
    collect(DEFAULT_CATALOG, page)
    assert str(page.soup) == before
    assert page.storage.get("theme") == "dark"


def test_missing_root_is_rejected():
    with pytest.raises(PageStateError):
        collect(DEFAULT_CATALOG, MarkupPage("<div>fragment</div>"))
    with pytest.raises(PageStateError):
        collect(DEFAULT_CATALOG, None)


def test_signals_are_fresh_each_pass():
    page = factory.create_tailwind_page()
    first = collect(DEFAULT_CATALOG, page)
    second = collect(DEFAULT_CATALOG, page)
    assert first == second
    assert all(a is not b for a, b in zip(first, second))
