"""In-memory page adapter backed by a BeautifulSoup document tree.

Computed styles, media features and page globals cannot be derived from a
static tree, so callers supply them explicitly. Attribute edits made through
:class:`MarkupElement` are dispatched synchronously to observers, which lets
tests and embedding hosts drive the change monitor without a browser.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from .catalog import DARK_MEDIA_QUERY
from .errors import StorageAccessError
from .page import MutationListener, PageElement, PageState, Storage, Unsubscribe

LIGHT_MEDIA_QUERY = "(prefers-color-scheme: light)"


class MemoryStorage(Storage):
    """Dict-backed storage; ``denied=True`` simulates a cross-origin refusal."""

    def __init__(self, data: Optional[Mapping[str, str]] = None, denied: bool = False) -> None:
        self._data: Dict[str, str] = dict(data or {})
        self.denied = denied

    def _check_access(self) -> None:
        if self.denied:
            raise StorageAccessError("Access to storage is denied for this document")

    def get(self, key: str) -> Optional[str]:
        self._check_access()
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._check_access()
        self._data[key] = str(value)

    def clear(self) -> None:
        self._check_access()
        self._data.clear()


class MarkupElement(PageElement):
    """Wraps a BeautifulSoup tag and reports attribute edits to its page."""

    def __init__(self, page: "MarkupPage", tag: Tag) -> None:
        self._page = page
        self._tag = tag

    def __eq__(self, other: object) -> bool:
        return isinstance(other, MarkupElement) and other._tag is self._tag

    def __hash__(self) -> int:
        return id(self._tag)

    def __repr__(self) -> str:
        return f"MarkupElement(<{self.tag_name}>)"

    @property
    def tag_name(self) -> str:
        return self._tag.name.lower()

    @property
    def class_list(self) -> List[str]:
        return list(self._tag.get("class") or [])

    def get_attribute(self, name: str) -> Optional[str]:
        value = self._tag.get(name)
        if value is None:
            return None
        if isinstance(value, list):
            return " ".join(value)
        return value

    def has_class(self, name: str) -> bool:
        return name in self.class_list

    def set_attribute(self, name: str, value: str) -> None:
        old_value = self.get_attribute(name)
        if name == "class":
            self._tag[name] = value.split()
        else:
            self._tag[name] = value
        self._page._notify(self, name, old_value)

    def remove_attribute(self, name: str) -> None:
        old_value = self.get_attribute(name)
        if old_value is None:
            return
        del self._tag[name]
        self._page._notify(self, name, old_value)

    def add_class(self, name: str) -> None:
        classes = self.class_list
        if name not in classes:
            classes.append(name)
            self.set_attribute("class", " ".join(classes))

    def remove_class(self, name: str) -> None:
        classes = self.class_list
        if name in classes:
            classes.remove(name)
            self.set_attribute("class", " ".join(classes))

    def toggle_class(self, name: str) -> None:
        if self.has_class(name):
            self.remove_class(name)
        else:
            self.add_class(name)


_Subscription = Tuple[frozenset, MutationListener]


class MarkupPage(PageState):
    def __init__(
        self,
        markup: str,
        storage: Optional[Storage] = None,
        root_styles: Optional[Mapping[str, str]] = None,
        prefers_dark: bool = False,
        global_names: Iterable[str] = (),
        media: Optional[Mapping[str, bool]] = None,
        url: Optional[str] = None,
    ) -> None:
        self.soup = BeautifulSoup(markup, "html.parser")
        self._storage = storage if storage is not None else MemoryStorage()
        self.root_styles: Dict[str, str] = dict(root_styles or {})
        self.media: Dict[str, bool] = {
            DARK_MEDIA_QUERY: prefers_dark,
            LIGHT_MEDIA_QUERY: not prefers_dark,
        }
        self.media.update(media or {})
        self.global_names = set(global_names)
        self._url = url
        self._observers: Dict[int, List[_Subscription]] = {}

    def _wrap(self, tag: Optional[Tag]) -> Optional[MarkupElement]:
        if tag is None:
            return None
        return MarkupElement(self, tag)

    @property
    def root(self) -> Optional[MarkupElement]:
        return self._wrap(self.soup.find("html"))

    @property
    def body(self) -> Optional[MarkupElement]:
        return self._wrap(self.soup.find("body"))

    @property
    def url(self) -> Optional[str]:
        return self._url

    @property
    def storage(self) -> Storage:
        return self._storage

    def element_by_id(self, element_id: str) -> Optional[MarkupElement]:
        return self._wrap(self.soup.find(id=element_id))

    def query_selector(self, selector: str) -> bool:
        return self.soup.select_one(selector) is not None

    def iter_class_names(self) -> Iterator[str]:
        for tag in self.soup.find_all(True):
            for class_name in tag.get("class") or []:
                yield class_name

    def computed_style(self, element: PageElement, prop: str) -> str:
        if element == self.root:
            return self.root_styles.get(prop, "")
        return ""

    def matches_media(self, query: str) -> bool:
        return self.media.get(query, False)

    def has_global(self, name: str) -> bool:
        return name in self.global_names

    def observe(
        self,
        element: PageElement,
        attributes: Iterable[str],
        listener: MutationListener,
    ) -> Unsubscribe:
        key = hash(element)
        subscription: _Subscription = (frozenset(attributes), listener)
        self._observers.setdefault(key, []).append(subscription)

        def unsubscribe() -> None:
            subscriptions = self._observers.get(key, [])
            if subscription in subscriptions:
                subscriptions.remove(subscription)

        return unsubscribe

    def observer_count(self) -> int:
        return sum(len(subscriptions) for subscriptions in self._observers.values())

    def _notify(self, element: MarkupElement, attribute: str, old_value: Optional[str]) -> None:
        for attributes, listener in list(self._observers.get(hash(element), [])):
            if attribute in attributes:
                listener(attribute, old_value, element.get_attribute(attribute))
