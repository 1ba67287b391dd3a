"""Host interfaces the detector reads page state through."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Iterable, Iterator, Optional

# (attribute name, old value, new value) for one mutation on an observed element
MutationListener = Callable[[str, Optional[str], Optional[str]], None]
Unsubscribe = Callable[[], None]


class Storage(ABC):
    """Key-value page storage (``localStorage`` in a browser).

    Every method may raise :class:`~darkmode_detection.errors.StorageAccessError`
    when the host refuses access.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value or ``None`` if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...


class PageElement(ABC):
    """A single element of the inspected document."""

    @property
    @abstractmethod
    def tag_name(self) -> str:
        ...

    @abstractmethod
    def get_attribute(self, name: str) -> Optional[str]:
        ...

    @abstractmethod
    def has_class(self, name: str) -> bool:
        ...


class PageState(ABC):
    """Read access to a live document-like environment."""

    # Hosts that may only be touched from the thread that created them.
    thread_bound = False

    @property
    @abstractmethod
    def root(self) -> Optional[PageElement]:
        """The document element (``<html>``)."""

    @property
    @abstractmethod
    def body(self) -> Optional[PageElement]:
        ...

    @property
    def url(self) -> Optional[str]:
        return None

    @property
    @abstractmethod
    def storage(self) -> Storage:
        ...

    @abstractmethod
    def element_by_id(self, element_id: str) -> Optional[PageElement]:
        ...

    @abstractmethod
    def query_selector(self, selector: str) -> bool:
        """Return True if at least one element matches ``selector``."""

    @abstractmethod
    def iter_class_names(self) -> Iterator[str]:
        """Yield every class token of every element, in document order."""

    @abstractmethod
    def computed_style(self, element: PageElement, prop: str) -> str:
        """Resolved value of a CSS property or custom property, ``""`` if unset."""

    @abstractmethod
    def matches_media(self, query: str) -> bool:
        ...

    @abstractmethod
    def has_global(self, name: str) -> bool:
        """Return True if the page exposes a global named ``name``."""

    @abstractmethod
    def observe(
        self,
        element: PageElement,
        attributes: Iterable[str],
        listener: MutationListener,
    ) -> Unsubscribe:
        """Subscribe ``listener`` to attribute mutations of ``element``.

        Only mutations of the named ``attributes`` are reported. The returned
        callable removes the subscription and is safe to call more than once.
        """
