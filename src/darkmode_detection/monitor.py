"""Live re-detection when a page changes its own theme state."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .detector import DarkModeDetector
from .errors import DarkModeDetectionError
from .page import MutationListener, PageElement, PageState, Unsubscribe
from .scheduling import ScheduledCall, Scheduler, ThreadingScheduler
from .types import DetectionResult

logger = logging.getLogger(__name__)

WATCHED_ATTRIBUTES = ("class", "data-theme", "data-mode", "color-mode", "data-bs-theme", "style")
DEFAULT_TARGET_IDS = ("root", "app", "__next")
DEFAULT_DEBOUNCE = 0.1


class MonitorState(str, Enum):
    IDLE = "idle"
    OBSERVING = "observing"


@dataclass(frozen=True)
class ThemeChangeEvent:
    """A raw attribute mutation on one of the observed elements."""

    attribute: str
    old_value: Optional[str]
    new_value: Optional[str]
    target: str


@dataclass(frozen=True)
class DetectionUpdateEvent:
    """The refreshed verdict after a burst of mutations settled."""

    result: DetectionResult
    mutations: Tuple[ThemeChangeEvent, ...]


MonitorEvent = Union[ThemeChangeEvent, DetectionUpdateEvent]
MonitorCallback = Callable[[MonitorEvent], None]


class ThemeChangeMonitor:
    """Observe the root, body and app-root elements for theme mutations.

    The first relevant mutation in a quiet period is reported immediately as
    a :class:`ThemeChangeEvent` and schedules one re-detection ``debounce``
    seconds later. Mutations arriving before that re-detection runs are
    folded into it, and all of them are listed on the resulting
    :class:`DetectionUpdateEvent`.

    The callback runs outside the monitor's lock, so it may call
    :meth:`stop` or wait on a thread that does. State is checked under the
    lock right before each delivery; once :meth:`stop` has returned no new
    delivery starts.

    Pages with ``thread_bound`` set (the Playwright adapter) need a
    scheduler that runs deferred calls on the caller's thread, such as
    :class:`~darkmode_detection.scheduling.PolledScheduler`.
    """

    def __init__(
        self,
        page: PageState,
        callback: MonitorCallback,
        detector: Optional[DarkModeDetector] = None,
        debounce: float = DEFAULT_DEBOUNCE,
        scheduler: Optional[Scheduler] = None,
        target_ids: Sequence[str] = DEFAULT_TARGET_IDS,
    ) -> None:
        self.page = page
        self.callback = callback
        self.detector = detector or DarkModeDetector()
        self.debounce = debounce
        self.scheduler = scheduler or ThreadingScheduler()
        self.target_ids = tuple(target_ids)
        if page.thread_bound and not self.scheduler.runs_on_caller_thread:
            raise ValueError(
                f"{type(page).__name__} must be driven from its own thread; "
                "pass a PolledScheduler and run it from that thread"
            )

        self._lock = threading.RLock()
        self._state = MonitorState.IDLE
        self._subscriptions: List[Unsubscribe] = []
        self._pending: Optional[ScheduledCall] = None
        # Bumped on stop so deferred calls from an earlier session are ignored.
        self._epoch = 0
        self._batch: List[ThemeChangeEvent] = []

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def observing(self) -> bool:
        return self._state is MonitorState.OBSERVING

    def targets(self) -> List[PageElement]:
        """Elements to observe; ids that are absent from the page are skipped."""

        candidates: List[Optional[PageElement]] = [self.page.root, self.page.body]
        candidates.extend(self.page.element_by_id(element_id) for element_id in self.target_ids)
        targets: List[PageElement] = []
        for element in candidates:
            if element is not None and element not in targets:
                targets.append(element)
        return targets

    def start(self) -> "ThemeChangeMonitor":
        with self._lock:
            if self._state is MonitorState.OBSERVING:
                return self
            self._state = MonitorState.OBSERVING
            for element in self.targets():
                unsubscribe = self.page.observe(element, WATCHED_ATTRIBUTES, self._listener_for(element))
                self._subscriptions.append(unsubscribe)
            logger.info("Observing %d element(s) for theme changes", len(self._subscriptions))
        return self

    def stop(self) -> None:
        """Stop observing. Safe to call repeatedly; no callback fires afterwards."""

        with self._lock:
            if self._state is MonitorState.IDLE:
                return
            self._state = MonitorState.IDLE
            subscriptions, self._subscriptions = self._subscriptions, []
            for unsubscribe in subscriptions:
                unsubscribe()
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
            self._epoch += 1
            self._batch = []
            logger.info("Stopped observing theme changes")

    def __enter__(self) -> "ThemeChangeMonitor":
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.stop()

    def _listener_for(self, element: PageElement) -> MutationListener:
        def listener(attribute: str, old_value: Optional[str], new_value: Optional[str]) -> None:
            self._on_mutation(element, attribute, old_value, new_value)

        return listener

    def _on_mutation(
        self,
        element: PageElement,
        attribute: str,
        old_value: Optional[str],
        new_value: Optional[str],
    ) -> None:
        if attribute not in WATCHED_ATTRIBUTES:
            return
        with self._lock:
            if self._state is not MonitorState.OBSERVING:
                return
            event = ThemeChangeEvent(
                attribute=attribute,
                old_value=old_value,
                new_value=new_value,
                target=element.tag_name,
            )
            self._batch.append(event)
            if self._pending is not None:
                return
            epoch = self._epoch
            self._pending = self.scheduler.call_later(self.debounce, lambda: self._flush(epoch))
        self.callback(event)

    def _is_current(self, epoch: int) -> bool:
        return self._state is MonitorState.OBSERVING and epoch == self._epoch

    def _flush(self, epoch: int) -> None:
        with self._lock:
            if not self._is_current(epoch):
                return
            mutations = tuple(self._batch)
            self._batch = []
            self._pending = None
        try:
            result = self.detector.detect(self.page)
        except DarkModeDetectionError as exc:
            logger.warning("Re-detection after theme change failed: %s", exc)
            return
        with self._lock:
            if not self._is_current(epoch):
                return
        self.callback(DetectionUpdateEvent(result=result, mutations=mutations))
