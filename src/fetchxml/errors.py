"""Exceptions raised by fetchxml APIs that have no diagnostics channel."""


class FetchXmlError(Exception):
    """Base exception for fetchxml failures."""


class LayoutXmlError(FetchXmlError, ValueError):
    """Raised when layout XML text cannot be read."""


class SettingsError(FetchXmlError):
    """Raised when configuration cannot be loaded."""
