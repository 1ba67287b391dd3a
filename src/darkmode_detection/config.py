"""JSON configuration for the detector, the change monitor and the browser."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .errors import ConfigError
from .types import SignalKind

COLOR_SCHEMES = ("dark", "light", "no-preference")
DEFAULT_TARGET_IDS = ("root", "app", "__next")


@dataclass(frozen=True)
class DetectionConfig:
    skip_expensive: bool = False
    disabled_kinds: Tuple[SignalKind, ...] = ()


@dataclass(frozen=True)
class MonitorConfig:
    debounce_ms: int = 100
    target_ids: Tuple[str, ...] = DEFAULT_TARGET_IDS

    @property
    def debounce(self) -> float:
        return self.debounce_ms / 1000.0


@dataclass(frozen=True)
class BrowserConfig:
    headless: bool = True
    window_size: str = "1920,1080"
    color_scheme: Optional[str] = None
    timeout_ms: int = 30000

    @property
    def viewport(self) -> Tuple[int, int]:
        width, height = self.window_size.split(",")
        return int(width), int(height)


@dataclass(frozen=True)
class DetectorConfig:
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    browser: BrowserConfig = field(default_factory=BrowserConfig)
    target_urls: Tuple[str, ...] = ()
    watch_seconds: float = 0.0
    output: str = "detection_results.json"


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, Mapping):
        raise ConfigError(f"{name} must be an object, got {type(section).__name__}")
    return section


def _flag(section: Mapping[str, Any], key: str, default: bool, prefix: str) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"{prefix}{key} must be true or false, got {value!r}")
    return value


def _strings(value: Any, where: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ConfigError(f"{where} must be a list of strings, got {value!r}")
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(f"{where} must only contain strings, got {item!r}")
    return tuple(value)


def _number(section: Mapping[str, Any], key: str, default: float, prefix: str) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{prefix}{key} must be a number, got {value!r}")
    return value


def _parse_kinds(values: Any) -> Tuple[SignalKind, ...]:
    kinds = []
    for value in _strings(values, "detection.disabled_kinds"):
        try:
            kinds.append(SignalKind(value))
        except ValueError as exc:
            raise ConfigError(f"Unknown signal kind in detection.disabled_kinds: {value!r}") from exc
    return tuple(kinds)


def _parse_browser(section: Mapping[str, Any]) -> BrowserConfig:
    color_scheme = section.get("color_scheme")
    if color_scheme is not None and color_scheme not in COLOR_SCHEMES:
        raise ConfigError(f"browser.color_scheme must be one of {COLOR_SCHEMES}, got {color_scheme!r}")
    window_size = section.get("window_size", "1920,1080")
    if not isinstance(window_size, str):
        raise ConfigError(f"browser.window_size must be a string like '1920,1080', got {window_size!r}")
    config = BrowserConfig(
        headless=_flag(section, "headless", True, "browser."),
        window_size=window_size,
        color_scheme=color_scheme,
        timeout_ms=int(_number(section, "timeout_ms", 30000, "browser.")),
    )
    try:
        config.viewport
    except ValueError as exc:
        raise ConfigError(f"browser.window_size must look like '1920,1080', got {config.window_size!r}") from exc
    return config


def config_from_dict(data: Mapping[str, Any]) -> DetectorConfig:
    """Build a validated config; every malformed value raises ``ConfigError``."""

    if not isinstance(data, Mapping):
        raise ConfigError("Configuration root must be a JSON object")
    detection = _section(data, "detection")
    monitor = _section(data, "monitor")

    urls = list(_strings(data.get("targetUrls"), "targetUrls"))
    target_url = data.get("targetUrl")
    if target_url is not None and not isinstance(target_url, str):
        raise ConfigError(f"targetUrl must be a string, got {target_url!r}")
    if target_url:
        urls.insert(0, target_url)

    output = data.get("output", "detection_results.json")
    if not isinstance(output, str):
        raise ConfigError(f"output must be a string, got {output!r}")

    return DetectorConfig(
        detection=DetectionConfig(
            skip_expensive=_flag(detection, "skip_expensive", False, "detection."),
            disabled_kinds=_parse_kinds(detection.get("disabled_kinds")),
        ),
        monitor=MonitorConfig(
            debounce_ms=int(_number(monitor, "debounce_ms", 100, "monitor.")),
            target_ids=_strings(monitor.get("target_ids", DEFAULT_TARGET_IDS), "monitor.target_ids"),
        ),
        browser=_parse_browser(_section(data, "browser")),
        target_urls=tuple(urls),
        watch_seconds=float(_number(data, "watchSeconds", 0, "")),
        output=output,
    )


def load_config(path: Union[str, Path]) -> DetectorConfig:
    """Load a JSON configuration file."""

    config_path = Path(path)
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data: Dict[str, Any] = json.load(f)
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file not found: {config_path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Configuration file is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a JSON object")
    return config_from_dict(data)
