"""Failure taxonomy shared by the extraction strategies and the HTTP layer.

A zero-length item list is not an error: it means nothing actionable was found.
"""

from __future__ import annotations


class ScanError(Exception):
    """Base class for extraction failures. ``status_code`` is the HTTP status."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(ScanError):
    """A required service credential is absent."""

    status_code = 501


class BadInputError(ScanError):
    """No image/text was supplied, or the image payload is malformed."""

    status_code = 400


class UpstreamError(ScanError):
    """The remote model service failed or returned a non-success status."""

    status_code = 502


class ParseError(ScanError):
    """The model reply was not valid JSON even after fence stripping."""

    status_code = 500


_BY_STATUS: dict[int, type[ScanError]] = {
    cls.status_code: cls for cls in (ConfigurationError, BadInputError, UpstreamError, ParseError)
}


def error_for_status(status_code: int, message: str) -> ScanError:
    """Rebuild the matching ScanError from an HTTP error response."""
    return _BY_STATUS.get(status_code, UpstreamError)(message)
