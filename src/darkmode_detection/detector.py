"""High level API that orchestrates collection, scoring and theme resolution."""

from __future__ import annotations

from typing import Iterable, List, Optional

from .catalog import DEFAULT_CATALOG, SignalCatalog
from .collector import SignalCollector
from .config import DetectionConfig
from .page import PageState
from .scoring import aggregate, implementation_tags, resolve_theme
from .types import DetectionResult, SignalKind


class DarkModeDetector:
    """Runs every catalog rule on a page and merges the outcome into one result."""

    def __init__(
        self,
        catalog: Optional[SignalCatalog] = None,
        skip_expensive: bool = False,
        skip_kinds: Iterable[SignalKind] = (),
    ) -> None:
        self.collector = SignalCollector(
            catalog if catalog is not None else DEFAULT_CATALOG,
            skip_expensive=skip_expensive,
            skip_kinds=skip_kinds,
        )

    @classmethod
    def from_config(cls, config: DetectionConfig, catalog: Optional[SignalCatalog] = None) -> "DarkModeDetector":
        return cls(catalog, skip_expensive=config.skip_expensive, skip_kinds=config.disabled_kinds)

    @property
    def catalog(self) -> SignalCatalog:
        return self.collector.catalog

    def detect(self, page: PageState) -> DetectionResult:
        """Return the verdict for the page's current state."""

        signals = self.collector.collect(page)
        return DetectionResult(
            confidence=aggregate(signals),
            current_theme=resolve_theme(page),
            implementation=implementation_tags(signals),
            signals=signals,
            url=page.url,
        )

    def predict_labels(self, page: PageState) -> List[str]:
        """Convenience helper that only returns the signal kinds that fired."""

        return [signal.kind.value for signal in self.detect(page).signals]

    def available_kinds(self) -> List[SignalKind]:
        """Expose which signal kinds the active rule set can produce."""

        active = self.catalog.without(
            kinds=self.collector.skip_kinds,
            expensive=self.collector.skip_expensive,
        )
        return list(active.kinds())


def detect(page: PageState) -> DetectionResult:
    """Run the default rule set once against ``page``."""

    return DarkModeDetector().detect(page)
