"""Live page adapter over Playwright's sync API."""

from __future__ import annotations

import itertools
import logging
import time
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from playwright.sync_api import Browser, BrowserContext, ElementHandle, JSHandle, Page
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Playwright, sync_playwright

from .config import BrowserConfig
from .errors import StorageAccessError
from .page import MutationListener, PageElement, PageState, Storage, Unsubscribe
from .scheduling import PolledScheduler

logger = logging.getLogger(__name__)

BINDING_NAME = "__darkModeMutation"

_OBSERVE_SCRIPT = """
([el, token, attributes, binding]) => {
  const observer = new MutationObserver((records) => {
    for (const record of records) {
      if (record.type !== 'attributes') continue;
      window[binding](token, record.attributeName, record.oldValue,
                      record.target.getAttribute(record.attributeName));
    }
  });
  observer.observe(el, { attributes: true, attributeOldValue: true, attributeFilter: attributes });
  window.__darkModeObservers = window.__darkModeObservers || {};
  window.__darkModeObservers[token] = observer;
}
"""

_DISCONNECT_SCRIPT = """
(token) => {
  const observers = window.__darkModeObservers || {};
  if (observers[token]) {
    observers[token].disconnect();
    delete observers[token];
  }
}
"""

_CLASS_NAMES_SCRIPT = """
() => {
  const names = [];
  for (const el of document.querySelectorAll('*')) {
    for (const name of el.classList) names.push(name);
  }
  return names;
}
"""


class PlaywrightStorage(Storage):
    """``window.localStorage`` of the page's current origin."""

    def __init__(self, page: Page) -> None:
        self._page = page

    def _evaluate(self, expression: str, arg=None):
        try:
            return self._page.evaluate(expression, arg)
        except PlaywrightError as exc:
            if "SecurityError" in str(exc) or "denied" in str(exc).lower():
                raise StorageAccessError(str(exc)) from exc
            raise

    def get(self, key: str) -> Optional[str]:
        return self._evaluate("(key) => window.localStorage.getItem(key)", key)

    def set(self, key: str, value: str) -> None:
        self._evaluate("([key, value]) => window.localStorage.setItem(key, value)", [key, str(value)])

    def clear(self) -> None:
        self._evaluate("() => window.localStorage.clear()")


class PlaywrightElement(PageElement):
    def __init__(self, handle: ElementHandle, tag_name: str) -> None:
        self.handle = handle
        self._tag_name = tag_name

    def __repr__(self) -> str:
        return f"PlaywrightElement(<{self._tag_name}>)"

    @property
    def tag_name(self) -> str:
        return self._tag_name

    def get_attribute(self, name: str) -> Optional[str]:
        return self.handle.get_attribute(name)

    def has_class(self, name: str) -> bool:
        return bool(self.handle.evaluate("(el, name) => el.classList.contains(name)", name))


class PlaywrightPage(PageState):
    """Reads theme state from a live browser page.

    Mutation events arrive through an exposed binding, so they are only
    delivered while the owning thread is inside a Playwright call such as
    ``page.wait_for_timeout``. :func:`pump` does exactly that.

    Handles for ``<html>`` and ``<body>`` are resolved once and reused until
    the main frame navigates or :meth:`dispose` is called.
    """

    thread_bound = True

    def __init__(self, page: Page) -> None:
        self.page = page
        self._storage = PlaywrightStorage(page)
        self._listeners: Dict[str, Tuple[frozenset, MutationListener]] = {}
        self._tokens = itertools.count(1)
        self._binding_installed = False
        self._cached: Dict[str, Optional[PlaywrightElement]] = {}
        self._handles: List[JSHandle] = []
        page.on("framenavigated", self._on_navigated)

    def _element(self, script: str, arg=None, tag_name: Optional[str] = None) -> Optional[PlaywrightElement]:
        js_handle = self.page.evaluate_handle(script, arg)
        handle = js_handle.as_element()
        if handle is None:
            js_handle.dispose()
            return None
        if tag_name is None:
            tag_name = handle.evaluate("(el) => el.tagName.toLowerCase()")
        self._handles.append(handle)
        return PlaywrightElement(handle, tag_name)

    def _cached_element(self, key: str, script: str) -> Optional[PlaywrightElement]:
        if key not in self._cached:
            self._cached[key] = self._element(script, tag_name=key)
        return self._cached[key]

    @property
    def root(self) -> Optional[PlaywrightElement]:
        return self._cached_element("html", "() => document.documentElement")

    @property
    def body(self) -> Optional[PlaywrightElement]:
        # A missing body may appear later in loading, so only hits are kept.
        element = self._cached_element("body", "() => document.body")
        if element is None:
            self._cached.pop("body", None)
        return element

    def dispose(self) -> None:
        """Release every element handle this adapter created."""

        self._cached.clear()
        handles, self._handles = self._handles, []
        for handle in handles:
            try:
                handle.dispose()
            except PlaywrightError as exc:
                logger.debug("Could not dispose %r: %s", handle, exc)

    def _on_navigated(self, frame) -> None:
        # Handles die with the old document's execution context; only forget them.
        if frame is self.page.main_frame:
            self._cached.clear()
            self._handles = []

    @property
    def url(self) -> Optional[str]:
        return self.page.url

    @property
    def storage(self) -> Storage:
        return self._storage

    def element_by_id(self, element_id: str) -> Optional[PlaywrightElement]:
        return self._element("(id) => document.getElementById(id)", element_id)

    def query_selector(self, selector: str) -> bool:
        return bool(self.page.evaluate("(selector) => document.querySelector(selector) !== null", selector))

    def iter_class_names(self) -> Iterator[str]:
        names: List[str] = self.page.evaluate(_CLASS_NAMES_SCRIPT)
        return iter(names)

    def computed_style(self, element: PageElement, prop: str) -> str:
        if not isinstance(element, PlaywrightElement):
            return ""
        value = self.page.evaluate(
            "([el, prop]) => getComputedStyle(el).getPropertyValue(prop)",
            [element.handle, prop],
        )
        return value or ""

    def matches_media(self, query: str) -> bool:
        return bool(self.page.evaluate("(query) => window.matchMedia(query).matches", query))

    def has_global(self, name: str) -> bool:
        return bool(self.page.evaluate("(name) => typeof window[name] !== 'undefined'", name))

    def observe(
        self,
        element: PageElement,
        attributes: Iterable[str],
        listener: MutationListener,
    ) -> Unsubscribe:
        if not isinstance(element, PlaywrightElement):
            raise TypeError(f"Cannot observe {element!r} on a Playwright page")
        self._install_binding()
        token = f"observer-{next(self._tokens)}"
        watched = frozenset(attributes)
        self._listeners[token] = (watched, listener)
        self.page.evaluate(_OBSERVE_SCRIPT, [element.handle, token, sorted(watched), BINDING_NAME])

        def unsubscribe() -> None:
            if self._listeners.pop(token, None) is None:
                return
            try:
                self.page.evaluate(_DISCONNECT_SCRIPT, token)
            except PlaywrightError as exc:
                # Page already closed or navigated; the observer is gone with it.
                logger.debug("Could not disconnect %s: %s", token, exc)

        return unsubscribe

    def _install_binding(self) -> None:
        if self._binding_installed:
            return
        self.page.expose_binding(BINDING_NAME, self._dispatch)
        self._binding_installed = True

    def _dispatch(self, source, token: str, attribute: str, old_value, new_value) -> None:
        entry = self._listeners.get(token)
        if entry is None:
            return
        watched, listener = entry
        if attribute in watched:
            listener(attribute, old_value, new_value)


def pump(page: Page, scheduler: PolledScheduler, seconds: float, interval_ms: int = 50) -> None:
    """Keep the page's event loop turning for ``seconds`` and run due callbacks."""

    deadline = time.monotonic() + seconds
    while time.monotonic() < deadline:
        page.wait_for_timeout(interval_ms)
        scheduler.run_pending()


class BrowserSession:
    """Launches Chromium and hands out one page, closing everything on exit."""

    def __init__(self, config: Optional[BrowserConfig] = None) -> None:
        self.config = config or BrowserConfig()
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self.current: Optional[PlaywrightPage] = None

    def __enter__(self) -> "BrowserSession":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def start(self) -> Page:
        width, height = self.config.viewport
        self.playwright = sync_playwright().start()
        self.browser = self.playwright.chromium.launch(headless=self.config.headless)
        context_options = {"viewport": {"width": width, "height": height}}
        if self.config.color_scheme:
            context_options["color_scheme"] = self.config.color_scheme
        self.context = self.browser.new_context(**context_options)
        self.page = self.context.new_page()
        self.page.set_default_timeout(self.config.timeout_ms)
        return self.page

    def open(self, url: str) -> PlaywrightPage:
        """Navigate a fresh tab to ``url``.

        Each call replaces the previous tab so the mutation binding is
        registered at most once per page.
        """
        if self.context is None:
            raise RuntimeError("Browser session is not started")
        self._close_page()
        self.page = self.context.new_page()
        self.page.set_default_timeout(self.config.timeout_ms)
        logger.info("Opening %s", url)
        self.page.goto(url, wait_until="domcontentloaded")
        self.current = PlaywrightPage(self.page)
        return self.current

    def _close_page(self) -> None:
        if self.current is not None:
            self.current.dispose()
            self.current = None
        if self.page is not None:
            self.page.close()
            self.page = None

    def close(self) -> None:
        if self.current is not None:
            self.current.dispose()
            self.current = None
        if self.context is not None:
            self.context.close()
            self.context = None
        if self.browser is not None:
            self.browser.close()
            self.browser = None
        if self.playwright is not None:
            self.playwright.stop()
            self.playwright = None
        self.page = None
