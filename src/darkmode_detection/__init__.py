"""Public exports for the dark mode detection package."""

from .catalog import DEFAULT_CATALOG, SignalCatalog
from .color import classify
from .detector import DarkModeDetector, detect
from .errors import ConfigError, DarkModeDetectionError, PageStateError, StorageAccessError
from .monitor import DetectionUpdateEvent, ThemeChangeEvent, ThemeChangeMonitor
from .scoring import aggregate, resolve_theme
from .types import ConfidenceTier, DetectionResult, Signal, SignalKind, Theme

__all__ = [
    "DEFAULT_CATALOG",
    "SignalCatalog",
    "classify",
    "DarkModeDetector",
    "detect",
    "ConfigError",
    "DarkModeDetectionError",
    "PageStateError",
    "StorageAccessError",
    "DetectionUpdateEvent",
    "ThemeChangeEvent",
    "ThemeChangeMonitor",
    "aggregate",
    "resolve_theme",
    "ConfidenceTier",
    "DetectionResult",
    "Signal",
    "SignalKind",
    "Theme",
]
