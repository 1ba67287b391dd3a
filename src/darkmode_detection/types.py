"""Common types used throughout the detection pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple


class SignalKind(str, Enum):
    """Categories of evidence a page can expose about its theming."""

    STORAGE = "storage"
    ATTRIBUTE = "attribute"
    CLASS_NAME = "class-name"
    LIBRARY = "library"
    TOGGLE_CONTROL = "toggle-control"
    CSS_VARIABLE = "css-variable"
    SYSTEM_PREFERENCE = "system-preference"
    COLOR_SCHEME_PROPERTY = "color-scheme-property"
    UTILITY_DARK_CLASS = "utility-dark-class"


class ConfidenceTier(str, Enum):
    """Coarse confidence buckets, strongest first."""

    VERY_HIGH = "very-high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        return TIER_WEIGHTS[self]


TIER_WEIGHTS: Mapping[ConfidenceTier, int] = MappingProxyType(
    {
        ConfidenceTier.VERY_HIGH: 4,
        ConfidenceTier.HIGH: 3,
        ConfidenceTier.MEDIUM: 2,
        ConfidenceTier.LOW: 1,
    }
)


class Theme(str, Enum):
    DARK = "dark"
    LIGHT = "light"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Signal:
    """A single piece of evidence produced by one catalog rule."""

    kind: SignalKind
    tier: ConfidenceTier
    detail: Mapping[str, Any] = field(default_factory=dict)
    weight: int = field(init=False)

    def __post_init__(self) -> None:
        detail = {key: tuple(value) if isinstance(value, list) else value for key, value in self.detail.items()}
        object.__setattr__(self, "weight", self.tier.weight)
        object.__setattr__(self, "detail", MappingProxyType(detail))

    def __hash__(self) -> int:
        return hash((self.kind, self.tier, tuple(sorted(self.detail.items()))))

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "kind": self.kind.value,
            "confidence": self.tier.value,
            "weight": self.weight,
        }
        for key, value in self.detail.items():
            payload[key] = list(value) if isinstance(value, tuple) else value
        return payload


@dataclass(frozen=True)
class DetectionSummary:
    total_signals: int
    tier_counts: Mapping[ConfidenceTier, int]
    implementation: Tuple[str, ...]
    detected_libraries: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_signals": self.total_signals,
            "critical_signals": self.tier_counts[ConfidenceTier.VERY_HIGH],
            "high_signals": self.tier_counts[ConfidenceTier.HIGH],
            "medium_signals": self.tier_counts[ConfidenceTier.MEDIUM],
            "low_signals": self.tier_counts[ConfidenceTier.LOW],
            "implementation_types": list(self.implementation),
            "detected_libraries": list(self.detected_libraries),
        }


@dataclass(frozen=True)
class DetectionResult:
    """The verdict for one collection pass over a page."""

    confidence: ConfidenceTier
    current_theme: str
    implementation: Tuple[str, ...]
    signals: Tuple[Signal, ...]
    url: Optional[str] = None

    @property
    def has_dark_mode(self) -> bool:
        return len(self.signals) > 0

    @property
    def summary(self) -> DetectionSummary:
        counts = {tier: 0 for tier in ConfidenceTier}
        for signal in self.signals:
            counts[signal.tier] += 1
        libraries: List[str] = [
            signal.detail["name"] for signal in self.signals if signal.kind is SignalKind.LIBRARY
        ]
        return DetectionSummary(
            total_signals=len(self.signals),
            tier_counts=MappingProxyType(counts),
            implementation=self.implementation,
            detected_libraries=tuple(libraries),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_dark_mode": self.has_dark_mode,
            "confidence": self.confidence.value,
            "current_theme": self.current_theme,
            "implementation": list(self.implementation),
            "signals": [signal.to_dict() for signal in self.signals],
            "summary": self.summary.to_dict(),
            "url": self.url,
        }
