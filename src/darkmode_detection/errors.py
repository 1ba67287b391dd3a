"""Exceptions raised by the detection package."""

from __future__ import annotations


class DarkModeDetectionError(Exception):
    """Base class for every error this package raises."""


class PageStateError(DarkModeDetectionError):
    """The page handed to the detector has no usable document root."""


class StorageAccessError(DarkModeDetectionError, PermissionError):
    """Reading page storage was refused, e.g. by a cross-origin policy."""


class ConfigError(DarkModeDetectionError, ValueError):
    """A configuration file is missing or malformed."""
