"""Evaluate catalog rules against a page and emit signals."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Type

from .catalog import (
    DEFAULT_CATALOG,
    AttributeRule,
    ClassNameRule,
    ClassPrefixRule,
    CssVariableRule,
    LibraryRule,
    MediaRule,
    Polarity,
    Rule,
    SelectorRule,
    SignalCatalog,
    StorageRule,
    StylePropertyRule,
    Target,
)
from .color import classify
from .errors import PageStateError
from .page import PageElement, PageState
from .types import Signal, SignalKind

logger = logging.getLogger(__name__)

Detail = Optional[Dict[str, Any]]
Evaluator = Callable[[Any, PageState], Detail]


def ensure_page(page: Optional[PageState]) -> PageState:
    """Reject pages without a document root before any rule runs."""

    if page is None:
        raise PageStateError("No page state was provided")
    if page.root is None:
        raise PageStateError("Page has no document root element")
    return page


def _target(page: PageState, target: Target) -> Optional[PageElement]:
    return page.root if target is Target.ROOT else page.body


def _eval_storage(rule: StorageRule, page: PageState) -> Detail:
    value = page.storage.get(rule.key)
    if value in rule.values:
        return {"key": rule.key, "value": value}
    return None


def _eval_attribute(rule: AttributeRule, page: PageState) -> Detail:
    element = _target(page, rule.target)
    if element is None:
        return None
    if element.get_attribute(rule.attribute) == rule.value:
        return {"attribute": rule.attribute, "value": rule.value, "element": element.tag_name}
    return None


def _eval_class_name(rule: ClassNameRule, page: PageState) -> Detail:
    element = _target(page, rule.target)
    if element is None or not element.has_class(rule.class_name):
        return None
    return {"class_name": rule.class_name, "element": element.tag_name}


def _eval_library(rule: LibraryRule, page: PageState) -> Detail:
    if any(page.has_global(name) for name in rule.global_names):
        return {"name": rule.name}
    body = page.body
    if body is not None and any(body.has_class(name) for name in rule.body_classes):
        return {"name": rule.name}
    if any(page.query_selector(selector) for selector in rule.selectors):
        return {"name": rule.name}
    return None


def _eval_selector(rule: SelectorRule, page: PageState) -> Detail:
    if page.query_selector(rule.selector):
        return {"selector": rule.selector}
    return None


def _eval_css_variable(rule: CssVariableRule, page: PageState) -> Detail:
    value = (page.computed_style(page.root, rule.variable) or "").strip()
    classification = classify(value)
    if classification is None:
        return None
    wanted_dark = rule.polarity is Polarity.DARK
    if classification.is_dark != wanted_dark:
        return None
    return {"variable": rule.variable, "value": value}


def _eval_media(rule: MediaRule, page: PageState) -> Detail:
    # Fires on every pass; only the reported preference varies.
    try:
        prefers_dark: Optional[bool] = bool(page.matches_media(rule.query))
    except Exception as exc:
        logger.debug("Media query %s could not be evaluated: %s", rule.query, exc)
        prefers_dark = None
    return {"query": rule.query, "prefers_dark": prefers_dark}


def _eval_style_property(rule: StylePropertyRule, page: PageState) -> Detail:
    value = (page.computed_style(page.root, rule.prop) or "").strip()
    if rule.contains in value:
        return {"property": rule.prop, "value": value}
    return None


def _eval_class_prefix(rule: ClassPrefixRule, page: PageState) -> Detail:
    # O(number of DOM nodes); stops once enough samples are gathered.
    samples: List[str] = []
    for class_name in page.iter_class_names():
        if class_name.startswith(rule.prefix) and class_name not in samples:
            samples.append(class_name)
            if len(samples) >= rule.sample_limit:
                break
    if not samples:
        return None
    return {"classes": tuple(samples)}


EVALUATORS: Dict[Type[Rule], Evaluator] = {
    StorageRule: _eval_storage,
    AttributeRule: _eval_attribute,
    ClassNameRule: _eval_class_name,
    LibraryRule: _eval_library,
    SelectorRule: _eval_selector,
    CssVariableRule: _eval_css_variable,
    MediaRule: _eval_media,
    StylePropertyRule: _eval_style_property,
    ClassPrefixRule: _eval_class_prefix,
}


def evaluate_rule(rule: Rule, page: PageState) -> Optional[Signal]:
    """Run one rule; any failure while reading the page means it did not fire."""

    evaluator = EVALUATORS.get(type(rule))
    if evaluator is None:
        logger.debug("No evaluator registered for %s", type(rule).__name__)
        return None
    try:
        detail = evaluator(rule, page)
    except Exception as exc:
        logger.debug("Rule %r skipped: %s", rule, exc)
        return None
    if detail is None:
        return None
    return Signal(kind=rule.kind, tier=rule.tier, detail=detail)


def collect(
    catalog: SignalCatalog,
    page: PageState,
    *,
    skip_expensive: bool = False,
    skip_kinds: Iterable[SignalKind] = (),
) -> Tuple[Signal, ...]:
    """Evaluate ``catalog`` against ``page`` in declaration order."""

    ensure_page(page)
    active = catalog.without(kinds=skip_kinds, expensive=skip_expensive)
    signals: List[Signal] = []
    for rule in active:
        signal = evaluate_rule(rule, page)
        if signal is not None:
            signals.append(signal)
    return tuple(signals)


class SignalCollector:
    """Binds a catalog to the switches that disable rule subsets."""

    def __init__(
        self,
        catalog: Optional[SignalCatalog] = None,
        skip_expensive: bool = False,
        skip_kinds: Iterable[SignalKind] = (),
    ) -> None:
        self.catalog = catalog if catalog is not None else DEFAULT_CATALOG
        self.skip_expensive = skip_expensive
        self.skip_kinds = frozenset(skip_kinds)

    def collect(self, page: PageState) -> Tuple[Signal, ...]:
        return collect(
            self.catalog,
            page,
            skip_expensive=self.skip_expensive,
            skip_kinds=self.skip_kinds,
        )
